import json
import logging
import sys

from gridsql.logging import (
    ContextFilter,
    CustomJsonFormatter,
    clear_request_context,
    set_logging_context,
    set_request_context,
    setup_logging,
)
from gridsql.telemetry import get_tracer


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_filter_respects_static_environment():
    set_logging_context(environment="qa", extra={"region": "us-east"})
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert getattr(record, "environment") == "qa"
        assert getattr(record, "region") == "us-east"
    finally:
        set_logging_context()


def test_context_filter_uses_request_context():
    set_logging_context(environment=None, extra=None)
    set_request_context(request_id="req-1", server_name="dev")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.server_name == "dev"
        assert record.sdk_name == "gridsql"
    finally:
        clear_request_context()


def test_context_filter_no_config_is_graceful():
    set_logging_context(environment=None, extra=None)
    record = _record()
    assert ContextFilter().filter(record)
    assert not hasattr(record, "environment")
    assert record.request_id is None


def test_static_context_does_not_override_record_extras():
    set_logging_context(extra={"table": "static"})
    try:
        record = _record(table="SQLUser.Employees")
        ContextFilter().filter(record)
        assert record.table == "SQLUser.Employees"
    finally:
        set_logging_context()


def test_json_formatter_includes_extras_and_core_fields():
    record = _record(table="SQLUser.Employees", rows=50)
    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["message"] == "sample"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["table"] == "SQLUser.Employees"
    assert payload["rows"] == 50
    assert "timestamp" in payload
    assert "msg" not in payload


def test_json_formatter_without_active_span_has_no_trace_ids():
    payload = json.loads(CustomJsonFormatter().format(_record()))
    assert "trace_id" not in payload


def test_json_formatter_serializes_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            name="test.logger",
            level=logging.ERROR,
            pathname=__file__,
            lineno=10,
            msg="failed",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(CustomJsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exception"]


def test_tracer_is_available_without_sdk():
    tracer = get_tracer("gridsql.tests")
    with tracer.start_as_current_span("noop"):
        payload = json.loads(CustomJsonFormatter().format(_record()))
    assert payload["message"] == "sample"


def test_json_formatter_masks_bound_values():
    record = _record(sql='UPDATE "S"."T" SET "c" = ? WHERE "ID" = ?', parameters=["secret", 1], password="pw")
    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["parameters"] == "***"
    assert payload["password"] == "***"
    assert payload["sql"].startswith("UPDATE")


def test_setup_logging_installs_json_handler(capsys):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("info")
        assert logging.getLogger("urllib3").level == logging.WARNING
        logging.getLogger("gridsql.tests").info("hello", extra={"table": "SQLUser.Employees"})
        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "hello"
        assert payload["table"] == "SQLUser.Employees"
        assert payload["sdk_name"] == "gridsql"
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
