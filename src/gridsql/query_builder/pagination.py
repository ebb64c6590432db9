"""Windowed pagination for dialects that only offer ``TOP n``.

IRIS has no OFFSET. Page *k* is fetched by asking an inner query for the
first ``offset + size`` rows and keeping the rows whose result-row ordinal
(``%VID``) lies past ``offset``::

    SELECT TOP s cols FROM (
        SELECT TOP (offset + s) cols FROM t WHERE ... ORDER BY ...
    ) WHERE %VID > offset

The first page skips the wrapper. Paging is only deterministic when the
inner query is ordered, which is why callers pass a tiebreaker to
``compile_sort``.
"""

from typing import Optional

from gridsql.common.exceptions import invalid_input_error
from gridsql.constants import COUNT_ALIAS, ROW_ORDINAL_COLUMN
from gridsql.query_builder.filters import EMPTY_FILTER, CompiledFilter
from gridsql.query_builder.identifiers import (
    escape_table_reference,
    validate_identifier,
    validate_non_negative_int,
    validate_positive_int,
)
from gridsql.types import PageRequest, QuerySpec, TableReference, TableSchema


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def select_list(schema: TableSchema) -> str:
    """Validated, quoted column list in ordinal order."""
    if not schema.columns:
        raise invalid_input_error(
            f"Table {schema.table.qualified_name} has no columns",
            field="schema",
        )
    return ", ".join(validate_identifier(column.name, "column name") for column in schema.columns)


def plan_page_query(
    table: TableReference,
    schema: TableSchema,
    page: PageRequest,
    compiled_filter: Optional[CompiledFilter] = None,
    order_by: str = "",
    row_ordinal: str = ROW_ORDINAL_COLUMN,
) -> QuerySpec:
    """Build the query for one page of rows.

    Args:
        table: Table to read.
        schema: Its columns; all of them are selected.
        page: Page size and zero-indexed page number.
        compiled_filter: Output of ``compile_filters``.
        order_by: Output of ``compile_sort``.
        row_ordinal: The dialect's result-row ordinal pseudo-column.

    Returns:
        QuerySpec whose parameters are the filter parameters.
    """
    compiled_filter = compiled_filter or EMPTY_FILTER
    size = validate_positive_int(page.page_size_rows, "page size")
    offset = validate_non_negative_int(page.row_offset, "offset")

    table_sql = escape_table_reference(table)
    columns = select_list(schema)

    if offset == 0:
        sql = _join(
            f"SELECT TOP {size} {columns} FROM {table_sql}",
            compiled_filter.where_clause,
            order_by,
        )
    else:
        inner = _join(
            f"SELECT TOP {offset + size} {columns} FROM {table_sql}",
            compiled_filter.where_clause,
            order_by,
        )
        sql = f"SELECT TOP {size} {columns} FROM ({inner}) WHERE {row_ordinal} > {offset}"

    return QuerySpec(sql_text=sql, parameters=list(compiled_filter.parameters))


def plan_count_query(table: TableReference, compiled_filter: Optional[CompiledFilter] = None) -> QuerySpec:
    """Build ``SELECT COUNT(*) AS total FROM t <where>`` with the filter parameters."""
    compiled_filter = compiled_filter or EMPTY_FILTER
    sql = _join(
        f"SELECT COUNT(*) AS {COUNT_ALIAS} FROM {escape_table_reference(table)}",
        compiled_filter.where_clause,
    )
    return QuerySpec(sql_text=sql, parameters=list(compiled_filter.parameters))
