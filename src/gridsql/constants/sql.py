"""SQL and query-related constants.

This module contains the fundamental SQL enums and dialect constants used
by the query builders, the executor and the metadata service.

These constants are in Layer 0 as they represent core SQL concepts that can
be used by any layer without creating circular dependencies.
"""

from enum import Enum


class QueryType(str, Enum):
    """SQL statement kinds issued by the engine.

    Used for logging, telemetry span attributes and result bookkeeping.

    Categories:
    - Data query: SELECT_PAGE, COUNT
    - Data manipulation: INSERT, UPDATE, DELETE
    - Catalog: CATALOG_TABLES, CATALOG_COLUMNS, CATALOG_PRIMARY_KEY
    """

    SELECT_PAGE = "SELECT_PAGE"
    COUNT = "COUNT"

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    CATALOG_TABLES = "CATALOG_TABLES"
    CATALOG_COLUMNS = "CATALOG_COLUMNS"
    CATALOG_PRIMARY_KEY = "CATALOG_PRIMARY_KEY"


class SortDirection(str, Enum):
    """Sort direction for the single active sort column.

    Values:
        ASCENDING: ORDER BY ... ASC
        DESCENDING: ORDER BY ... DESC
        NONE: sorting disabled
    """

    ASCENDING = "ascending"
    DESCENDING = "descending"
    NONE = "none"

    @property
    def keyword(self) -> str:
        """SQL keyword for the direction (empty for NONE)."""
        if self is SortDirection.ASCENDING:
            return "ASC"
        if self is SortDirection.DESCENDING:
            return "DESC"
        return ""


# Identifier grammar accepted for schema, table and column names
IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"
MAX_IDENTIFIER_LENGTH = 128

# IRIS defaults
DEFAULT_SCHEMA = "SQLUser"
ROW_ORDINAL_COLUMN = "%VID"

# LIKE pattern dialect
LIKE_ESCAPE_CHAR = "\\"
LIKE_ANY = "%"
LIKE_SINGLE = "_"
FILTER_WILDCARD_ANY = "*"
FILTER_WILDCARD_SINGLE = "?"

COUNT_ALIAS = "total"
