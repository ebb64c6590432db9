"""Type-aware cell conversion for exports.

Spreadsheet writers need native values, not display strings. Conversion
dispatches on the column's ``ColumnCategory``; each category has exactly
one converter and a failed parse returns the raw value unchanged.
"""

from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from gridsql.constants import ColumnCategory, categorize_sql_type
from gridsql.types import TableSchema

_TRUE_TEXT = frozenset({"1", "true"})


def _to_boolean(raw: Any) -> bool:
    return str(raw).strip().lower() in _TRUE_TEXT


def _to_integer(raw: Any) -> Any:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return raw


def _to_decimal(raw: Any) -> Any:
    if isinstance(raw, float):
        return raw
    try:
        return float(str(raw).strip())
    except ValueError:
        return raw


SQL_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
)

SQL_TIME_FORMATS = ("%H:%M:%S", "%H:%M:%S.%f")


def _strptime_any(text: str, formats: Tuple[str, ...]) -> Optional[datetime]:
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_sql_datetime(text: str) -> Optional[datetime]:
    """Parse a server timestamp string, or return None.

    IRIS trims trailing zeros from fractional seconds (``10:30:00.1``),
    which ``fromisoformat`` rejects before Python 3.11.
    """
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return _strptime_any(text, SQL_DATETIME_FORMATS)


def _to_date(raw: Any) -> Any:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    parsed = parse_sql_datetime(text)
    return parsed.date() if parsed is not None else raw


def _to_time(raw: Any) -> Any:
    if isinstance(raw, time):
        return raw
    text = str(raw).strip()
    try:
        return time.fromisoformat(text)
    except ValueError:
        pass
    parsed = _strptime_any(text, SQL_TIME_FORMATS)
    return parsed.time() if parsed is not None else raw


def _to_timestamp(raw: Any) -> Any:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    parsed = parse_sql_datetime(str(raw).strip())
    return parsed if parsed is not None else raw


def _to_text(raw: Any) -> str:
    return str(raw)


CONVERTERS: Dict[ColumnCategory, Callable[[Any], Any]] = {
    ColumnCategory.BOOLEAN: _to_boolean,
    ColumnCategory.INTEGER: _to_integer,
    ColumnCategory.DECIMAL: _to_decimal,
    ColumnCategory.DATE: _to_date,
    ColumnCategory.TIME: _to_time,
    ColumnCategory.TIMESTAMP: _to_timestamp,
    ColumnCategory.TEXT: _to_text,
}


def convert_for_export(raw: Any, sql_type: str) -> Any:
    """Convert one cell to its native Python value.

    ``None`` passes through for every type. Booleans are true only for
    ``"1"``/``"true"`` (case-insensitive). Numeric and temporal types fall
    back to the raw value when parsing fails. Everything else becomes
    ``str``.
    """
    if raw is None:
        return None
    return CONVERTERS[categorize_sql_type(sql_type)](raw)


def convert_row(row: Mapping[str, Any], schema: TableSchema) -> Dict[str, Any]:
    """Convert a row, keeping only schema columns in ordinal order."""
    return {
        column.name: convert_for_export(row.get(column.name), column.sql_type)
        for column in schema.columns
    }


def convert_rows(rows: List[Mapping[str, Any]], schema: TableSchema) -> List[Dict[str, Any]]:
    return [convert_row(row, schema) for row in rows]
