"""Tests for the error model."""

import logging

import pytest

from gridsql.common.exceptions import (
    ErrorCode,
    GridSQLError,
    cancelled_error,
    invalid_identifier_error,
    remote_query_error,
    server_unreachable_error,
    timeout_error,
    transport_failed_error,
    user_message,
)
from gridsql.types import ErrorInfo, OperationResult


class TestGridSQLError:
    """Test error construction and conversion."""

    def test_str_includes_code(self):
        error = GridSQLError("boom", error_code=ErrorCode.INVALID_RESPONSE)
        assert str(error) == "[EXECUTION_002] boom"

    def test_str_includes_cause(self):
        error = GridSQLError("boom", cause=ValueError("bad"))
        assert "caused by: ValueError: bad" in str(error)

    def test_retryable_codes(self):
        assert timeout_error(5).is_retryable
        assert server_unreachable_error("h").is_retryable
        assert not transport_failed_error(500).is_retryable

    def test_validation_errors_are_not_recoverable(self):
        assert not invalid_identifier_error("x y", "column name").is_recoverable
        assert transport_failed_error(500).is_recoverable

    def test_to_error_info(self):
        info = remote_query_error("SQLCODE -1", query="SELECT 1").to_error_info("fetch_page")

        assert isinstance(info, ErrorInfo)
        assert info.code is ErrorCode.REMOTE_QUERY_ERROR
        assert info.message == "SQLCODE -1"
        assert info.context == "fetch_page"
        assert info.details["query"] == "SELECT 1"

    def test_long_query_is_truncated(self):
        error = remote_query_error("x", query="S" * 600)
        assert len(error.details["query"]) == 503

    def test_default_user_message(self):
        assert cancelled_error().message == user_message(ErrorCode.CANCELLED)

    def test_to_dict(self):
        payload = transport_failed_error(502).to_dict()
        assert payload["error_code"] == "CONNECTION_002"
        assert payload["error_name"] == "TRANSPORT_FAILED"
        assert payload["details"] == {"status_code": 502}


class TestErrorLogging:
    """Errors log themselves on construction."""

    def test_logged_at_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="gridsql.common.exceptions"):
            transport_failed_error(500)
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.error_code == "CONNECTION_002"

    def test_cancellation_logged_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="gridsql.common.exceptions"):
            cancelled_error()
        assert caplog.records[-1].levelno == logging.INFO


class TestOperationResult:
    """Test the result wrapper."""

    def test_ok(self):
        result = OperationResult.ok([1, 2], rows_affected=None)
        assert result.success
        assert result.data == [1, 2]
        assert result.error is None

    def test_fail_to_dict_flattens_code(self):
        result = OperationResult.fail(timeout_error(3).to_error_info("count_rows"))
        payload = result.to_dict()
        assert payload["success"] is False
        assert payload["error"]["code"] == "CONNECTION_004"

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_every_code_has_user_message(self, code):
        assert user_message(code) != "An unexpected error occurred."
