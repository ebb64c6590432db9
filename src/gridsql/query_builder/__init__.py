"""Query construction for gridsql.

Leaves first:

    - identifiers: validation and quoting of schema/table/column names
    - filters: wildcard filters and sort into WHERE/ORDER BY fragments
    - pagination: TOP/%VID windowed page and count queries
    - base/iris: dialect-aware builder composing the above
"""

from gridsql.query_builder.base import BaseQueryBuilder
from gridsql.query_builder.filters import (
    CompiledFilter,
    compile_filters,
    compile_sort,
    translate_wildcard_pattern,
)
from gridsql.query_builder.identifiers import (
    escape_table_reference,
    is_valid_identifier,
    parse_qualified_table_name,
    validate_identifier,
    validate_non_negative_int,
)
from gridsql.query_builder.iris import IrisQueryBuilder
from gridsql.query_builder.pagination import plan_count_query, plan_page_query

__all__ = [
    "BaseQueryBuilder",
    "IrisQueryBuilder",
    "CompiledFilter",
    "compile_filters",
    "compile_sort",
    "translate_wildcard_pattern",
    "escape_table_reference",
    "is_valid_identifier",
    "parse_qualified_table_name",
    "validate_identifier",
    "validate_non_negative_int",
    "plan_count_query",
    "plan_page_query",
]
