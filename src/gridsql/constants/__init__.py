"""Constants module for gridsql.

This module contains all constant values and enumerations used throughout
the package. As Layer 0 in the architecture, this module has no dependencies
on other gridsql modules.

Organization:
    - sql: statement kinds, sort direction and dialect constants
    - types: column type categories
"""

from gridsql.constants.sql import (
    COUNT_ALIAS,
    DEFAULT_SCHEMA,
    IDENTIFIER_PATTERN,
    LIKE_ESCAPE_CHAR,
    MAX_IDENTIFIER_LENGTH,
    ROW_ORDINAL_COLUMN,
    QueryType,
    SortDirection,
)
from gridsql.constants.types import ColumnCategory, categorize_sql_type

__all__ = [
    "QueryType",
    "SortDirection",
    "ColumnCategory",
    "categorize_sql_type",
    "COUNT_ALIAS",
    "DEFAULT_SCHEMA",
    "IDENTIFIER_PATTERN",
    "LIKE_ESCAPE_CHAR",
    "MAX_IDENTIFIER_LENGTH",
    "ROW_ORDINAL_COLUMN",
]
