"""HTTP transport for the IRIS Atelier REST API built on ``requests``.

Each call is one HTTP round trip with its own timeout. Failures are raised
as ``GridSQLError`` with a transport error code; callers up the stack turn
them into structured results.
"""

import threading
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import requests
from opentelemetry.trace import SpanKind

from gridsql.common.exceptions import (
    auth_failed_error,
    cancelled_error,
    invalid_response_error,
    remote_query_error,
    server_unreachable_error,
    timeout_error,
    transport_failed_error,
)
from gridsql.logging import get_logger
from gridsql.settings import TransportSettings, get_settings
from gridsql.transport.urls import build_base_url, build_query_url
from gridsql.types import Credentials, ServerSpec
from gridsql.utils import statement_attributes, traced

logger = get_logger(__name__)

_AUTH_ERROR_MARKERS = ("authentication", "access denied", "unauthorized", "not authorized")

_READ_STATEMENT_PREFIXES = ("SELECT", "WITH")


def _is_read_statement(sql_text: str) -> bool:
    return sql_text.lstrip().upper().startswith(_READ_STATEMENT_PREFIXES)


def _encode_parameter(value: Any) -> Any:
    """Make a bound value JSON-serializable."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _section(body: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return ``body[key]`` as an object, treating a missing key as empty."""
    value = body.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise invalid_response_error(
            f"Response field '{key}' is not an object",
            details={"field": key, "content_type": type(value).__name__},
        )
    return value


def _execute_span_attributes(self, server=None, namespace=None, credentials=None, sql_text=None, *args, **kwargs) -> Dict[str, Any]:
    attrs = statement_attributes("execute", sql_text)
    if server is not None:
        attrs["server.address"] = server.host
        attrs["server.port"] = server.port
    attrs["db.namespace"] = namespace
    return attrs


def _describe_span_attributes(self, server=None, *args, **kwargs) -> Dict[str, Any]:
    attrs = statement_attributes("describe_server")
    if server is not None:
        attrs["server.address"] = server.host
        attrs["server.port"] = server.port
    return attrs


class AtelierTransport:
    """Transport client speaking the Atelier REST API.

    Example:
        >>> transport = AtelierTransport()
        >>> rows = transport.execute(
        ...     server, "USER", credentials,
        ...     'SELECT TOP 5 "ID" FROM "SQLUser"."Employees"', [],
        ... )
    """

    def __init__(
        self,
        settings: Optional[TransportSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or get_settings().transport
        self.session = session or requests.Session()

    def base_url(self, server: ServerSpec) -> str:
        return build_base_url(server, self.settings.default_path_prefix)

    @traced("gridsql.transport.execute", kind=SpanKind.CLIENT, attribute_getter=_execute_span_attributes)
    def execute(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        sql_text: str,
        parameters: Sequence[Any] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Dict[str, Any]]:
        """Run one parameterized statement and return ``result.content``.

        Raises:
            GridSQLError: AUTH_FAILED, TRANSPORT_FAILED, SERVER_UNREACHABLE,
                TIMEOUT_ERROR, CANCELLED, REMOTE_QUERY_ERROR or
                INVALID_RESPONSE.
        """
        url = build_query_url(self.base_url(server), namespace)
        logger.debug(
            "Executing query",
            extra={"url": url, "sql": sql_text, "parameter_count": len(parameters)},
        )

        body = self._send(
            "POST",
            url,
            server,
            credentials,
            cancel_event,
            discard_on_cancel=_is_read_statement(sql_text),
            json={"query": sql_text, "parameters": [_encode_parameter(p) for p in parameters]},
        )
        self._raise_for_status_errors(body, sql_text)

        content = _section(body, "result").get("content")
        if content is None:
            return []
        if not isinstance(content, list):
            raise invalid_response_error(
                "Query result content is not a list",
                details={"content_type": type(content).__name__},
            )
        return [row for row in content if isinstance(row, dict)]

    @traced("gridsql.transport.describe_server", kind=SpanKind.CLIENT, attribute_getter=_describe_span_attributes)
    def describe_server(
        self,
        server: ServerSpec,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """GET the API root and return its ``result.content`` descriptor."""
        url = self.base_url(server)
        logger.debug("Fetching server descriptor", extra={"url": url})

        body = self._send("GET", url, server, credentials, cancel_event, discard_on_cancel=True)
        self._raise_for_status_errors(body)

        content = _section(body, "result").get("content") or {}
        if not isinstance(content, dict):
            raise invalid_response_error(
                "Server descriptor content is not an object",
                details={"content_type": type(content).__name__},
            )
        return content

    def close(self) -> None:
        self.session.close()

    def _send(
        self,
        method: str,
        url: str,
        server: ServerSpec,
        credentials: Credentials,
        cancel_event: Optional[threading.Event],
        discard_on_cancel: bool = True,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object.

        A cancel event set while a read was in flight discards its response.
        Writes report their real outcome once the server has answered, since
        the change may already be committed.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise cancelled_error(details={"url": url})

        try:
            response = self.session.request(
                method,
                url,
                auth=(credentials.username, credentials.password.get_secret_value()),
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout_seconds,
                verify=self.settings.verify_tls,
                **kwargs,
            )
        except requests.exceptions.Timeout as exc:
            if cancel_event is not None and cancel_event.is_set():
                raise cancelled_error(details={"url": url}, cause=exc) from exc
            raise timeout_error(self.settings.timeout_seconds, cause=exc) from exc
        except requests.exceptions.RequestException as exc:
            if cancel_event is not None and cancel_event.is_set():
                raise cancelled_error(details={"url": url}, cause=exc) from exc
            raise server_unreachable_error(server.host, cause=exc) from exc

        if discard_on_cancel and cancel_event is not None and cancel_event.is_set():
            raise cancelled_error(details={"url": url})

        if response.status_code in (401, 403):
            raise auth_failed_error(status_code=response.status_code)
        if not response.ok:
            raise transport_failed_error(response.status_code, details={"url": url})

        try:
            body = response.json()
        except ValueError as exc:
            raise invalid_response_error("Response body is not valid JSON", cause=exc) from exc

        if not isinstance(body, dict):
            raise invalid_response_error("Response body is not a JSON object")
        return body

    @staticmethod
    def _raise_for_status_errors(body: Dict[str, Any], sql_text: Optional[str] = None) -> None:
        """Raise for errors reported in ``status.errors`` of a 2xx response."""
        errors = _section(body, "status").get("errors") or []
        if not isinstance(errors, list):
            raise invalid_response_error("status.errors is not a list")
        if not errors:
            return

        first = errors[0]
        message = str(first.get("error", "")) if isinstance(first, dict) else str(first)
        if any(marker in message.lower() for marker in _AUTH_ERROR_MARKERS):
            raise auth_failed_error(details={"server_message": message})
        raise remote_query_error(
            message,
            query=sql_text,
            details={"error_count": len(errors)},
        )

