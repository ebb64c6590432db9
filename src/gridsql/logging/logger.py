"""Structured JSON logging for gridsql.

Records are rendered as one JSON object per line. Fields passed through
``extra=`` are merged at the top level, the active OpenTelemetry span is
attached as ``trace_id``/``span_id`` and bound SQL values are masked.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional, Set

from opentelemetry import trace

REDACTED = "***"

# Extra keys whose values must never reach a log sink
SENSITIVE_KEYS: FrozenSet[str] = frozenset({"password", "parameters", "auth", "new_value", "values"})

# Chatty third-party loggers capped at WARNING unless the base level is DEBUG
_LIBRARY_LOGGERS = ("urllib3", "requests")


def _build_reserved_keys() -> Set[str]:
    template = logging.LogRecord(
        name="gridsql",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    )
    reserved = set(template.__dict__.keys())
    reserved.update({"asctime", "message"})
    return reserved


_RESERVED_LOG_RECORD_KEYS = _build_reserved_keys()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """JSON formatter for engine log records.

    Output keys: every ``extra`` field, then ``timestamp`` (UTC ISO-8601),
    ``level``, ``logger``, ``message``, optional ``trace_id``/``span_id``
    and ``exception``. Values of keys in ``SENSITIVE_KEYS`` are replaced by
    ``***``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {}

        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_KEYS:
                continue
            log_record[key] = REDACTED if key in SENSITIVE_KEYS else value

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            log_record["trace_id"] = format(span_context.trace_id, "032x")
            log_record["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """Install the JSON console handler on the root logger.

    Args:
        level: Base log level. Defaults to ``settings.log_level``
            (``GRIDSQL_LOG_LEVEL``). SQL text is only emitted at DEBUG.
    """
    if level is None:
        from gridsql.settings import get_settings
        level = get_settings().log_level
    level = level.upper()
    library_level = "DEBUG" if level == "DEBUG" else "WARNING"

    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "gridsql_json": {
                "()": "gridsql.logging.logger.CustomJsonFormatter",
            }
        },
        "filters": {
            "gridsql_context": {
                "()": "gridsql.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "gridsql_json",
                "filters": ["gridsql_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            name: {"level": library_level} for name in _LIBRARY_LOGGERS
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(config_dict)
