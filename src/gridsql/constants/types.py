"""Column type categories.

Remote SQL types are folded into a small closed set of categories. Every
type-dependent behavior (export conversion, DataFrame dtypes) dispatches on
the category rather than on the raw type string.
"""

from enum import Enum
from typing import FrozenSet


class ColumnCategory(str, Enum):
    """Closed set of column type categories.

    Values:
        BOOLEAN: BIT, BOOLEAN
        INTEGER: INTEGER, BIGINT, SMALLINT, TINYINT, ...
        DECIMAL: NUMERIC, DECIMAL, DOUBLE, FLOAT, REAL, MONEY, ...
        DATE: DATE
        TIME: TIME
        TIMESTAMP: TIMESTAMP, DATETIME, SMALLDATETIME, POSIXTIME
        TEXT: everything else
    """

    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TEXT = "text"


BOOLEAN_TYPES: FrozenSet[str] = frozenset({"BIT", "BOOLEAN", "BOOL"})
INTEGER_TYPES: FrozenSet[str] = frozenset(
    {"INTEGER", "INT", "BIGINT", "SMALLINT", "TINYINT", "MEDIUMINT", "COUNTER"}
)
DECIMAL_TYPES: FrozenSet[str] = frozenset(
    {
        "NUMERIC",
        "DECIMAL",
        "DEC",
        "DOUBLE",
        "DOUBLE PRECISION",
        "FLOAT",
        "REAL",
        "MONEY",
        "SMALLMONEY",
    }
)
DATE_TYPES: FrozenSet[str] = frozenset({"DATE"})
TIME_TYPES: FrozenSet[str] = frozenset({"TIME"})
TIMESTAMP_TYPES: FrozenSet[str] = frozenset(
    {"TIMESTAMP", "DATETIME", "DATETIME2", "SMALLDATETIME", "POSIXTIME"}
)


def categorize_sql_type(sql_type: str) -> ColumnCategory:
    """Map a remote SQL type name to its category.

    Length/precision suffixes such as ``VARCHAR(50)`` or ``NUMERIC(10,2)``
    are ignored.
    """
    base = (sql_type or "").strip().upper().split("(", 1)[0].strip()

    if base in BOOLEAN_TYPES:
        return ColumnCategory.BOOLEAN
    if base in INTEGER_TYPES:
        return ColumnCategory.INTEGER
    if base in DECIMAL_TYPES:
        return ColumnCategory.DECIMAL
    if base in DATE_TYPES:
        return ColumnCategory.DATE
    if base in TIME_TYPES:
        return ColumnCategory.TIME
    if base in TIMESTAMP_TYPES:
        return ColumnCategory.TIMESTAMP
    return ColumnCategory.TEXT
