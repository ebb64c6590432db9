import functools
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from gridsql.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])

MAX_STATEMENT_ATTRIBUTE_LENGTH = 1000

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from gridsql.logging import get_logger
        logger = get_logger(__name__)
    return logger


def statement_attributes(operation: str, sql_text: Optional[str] = None) -> Dict[str, Any]:
    """Build the ``db.*`` span attributes for a SQL round trip.

    The statement is truncated; bound parameter values are never recorded.
    """
    attrs: Dict[str, Any] = {
        "db.system": "intersystems_iris",
        "db.operation": operation,
    }
    if sql_text:
        attrs["db.statement"] = sql_text[:MAX_STATEMENT_ATTRIBUTE_LENGTH]
    return attrs


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
) -> Callable[[F], F]:
    """Instrument a function with an OpenTelemetry span.

    Args:
        span_name: Optional explicit span name. Defaults to module-qualified function name.
        kind: Span kind, defaults to INTERNAL.
        attributes: Static span attributes to attach.
        attribute_getter: Callable receiving the wrapped function's arguments
            and returning additional attributes at call time.

    Exceptions are recorded on the span, which is marked as errored, and
    then re-raised unchanged.
    """

    def decorator(func: F) -> F:
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        def _collect_attributes(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Dict[str, Any]:
            collected: Dict[str, Any] = {}
            if attributes:
                collected.update({k: v for k, v in attributes.items() if v is not None})

            if attribute_getter:
                try:
                    dynamic_attrs = attribute_getter(*args, **kwargs)
                except Exception as exc:  # pragma: no cover
                    _get_logger().warning("trace attribute getter failed: %s", exc)
                    dynamic_attrs = None

                if dynamic_attrs:
                    collected.update({k: v for k, v in dynamic_attrs.items() if v is not None})

            return collected

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(func.__module__)

            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in _collect_attributes(args, kwargs).items():
                    span.set_attribute(key, value)

                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper  # type: ignore[return-value]

    return decorator
