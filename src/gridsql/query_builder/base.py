from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from gridsql.common.exceptions import invalid_input_error
from gridsql.constants import QueryType
from gridsql.query_builder.filters import compile_filters, compile_sort
from gridsql.query_builder.identifiers import (
    escape_table_reference,
    parse_qualified_table_name,
    validate_identifier,
)
from gridsql.query_builder.pagination import plan_count_query, plan_page_query
from gridsql.settings import _Settings
from gridsql.types import (
    FilterCriterion,
    PageRequest,
    QuerySpec,
    SortSpec,
    TableReference,
    TableSchema,
)


class BaseQueryBuilder(ABC):
    """Base interface for query builders with SQL injection protection.

    Query builders turn browsing and editing intents into ``QuerySpec``
    objects. They do NOT execute queries; that responsibility belongs to
    the executor and the transport.

    Security Principles:
        1. **Input Validation**: every identifier goes through
           ``validate_identifier`` at the point of use
        2. **Bound Values**: data values only ever travel as ``?`` parameters
        3. **Whitelist Approach**: only ``[A-Za-z_][A-Za-z0-9_]*`` names are
           allowed, at most 128 characters long
        4. **Closed Enums**: sort direction comes from ``SortDirection``,
           never from free text

    Subclasses supply the dialect-specific pieces: the row-ordinal column
    used for windowed paging and the catalog queries.
    """

    def __init__(self, settings: _Settings):
        """Initialize query builder.

        Args:
            settings: Settings providing the default schema for unqualified
                      table names.
        """
        self.settings = settings
        self.default_schema = settings.query.default_schema

    @property
    @abstractmethod
    def row_ordinal_column(self) -> str:
        """Result-row ordinal pseudo-column of the dialect."""
        pass

    @abstractmethod
    def build_tables_catalog_query(self) -> QuerySpec:
        """Build the query listing base tables ordered by schema and name."""
        pass

    @abstractmethod
    def build_columns_catalog_query(self, table: TableReference) -> QuerySpec:
        """Build the query listing a table's columns in ordinal order."""
        pass

    @abstractmethod
    def build_primary_key_query(self, table: TableReference) -> QuerySpec:
        """Build the query returning a table's primary key column(s)."""
        pass

    def parse_table(self, display: str) -> TableReference:
        """Parse ``schema.table`` using the configured default schema."""
        return parse_qualified_table_name(display, self.default_schema)

    def quote_identifier(self, identifier: str, identifier_type: str = "identifier") -> str:
        """Quote an identifier for safe SQL usage."""
        return validate_identifier(identifier, identifier_type)

    def build_page_query(
        self,
        table: TableReference,
        schema: TableSchema,
        page: PageRequest,
        filters: Optional[Sequence[FilterCriterion]] = None,
        sort: Optional[SortSpec] = None,
        tiebreaker: Optional[str] = None,
    ) -> QuerySpec:
        """Build the windowed SELECT for one page."""
        compiled = compile_filters(filters, schema)
        order_by = compile_sort(sort, schema, tiebreaker)
        return plan_page_query(table, schema, page, compiled, order_by, self.row_ordinal_column)

    def build_count_query(
        self,
        table: TableReference,
        schema: TableSchema,
        filters: Optional[Sequence[FilterCriterion]] = None,
    ) -> QuerySpec:
        """Build the COUNT(*) query sharing the page query's filter."""
        return plan_count_query(table, compile_filters(filters, schema))

    def build_update(
        self,
        table: TableReference,
        column: str,
        new_value: Any,
        primary_key_column: str,
        primary_key_value: Any,
    ) -> QuerySpec:
        """Build ``UPDATE t SET "col" = ? WHERE "pk" = ?``."""
        table_sql = escape_table_reference(table)
        column_sql = validate_identifier(column, "column name")
        pk_sql = validate_identifier(primary_key_column, "primary key column")
        return QuerySpec(
            sql_text=f"UPDATE {table_sql} SET {column_sql} = ? WHERE {pk_sql} = ?",
            parameters=[new_value, primary_key_value],
        )

    def build_insert(
        self,
        table: TableReference,
        columns: Sequence[str],
        values: Sequence[Any],
    ) -> QuerySpec:
        """Build ``INSERT INTO t ("c1", ...) VALUES (?, ...)``.

        Raises:
            GridSQLError: INVALID_INPUT when ``columns`` is empty or its
                length differs from ``values``.
        """
        if len(columns) == 0:
            raise invalid_input_error("Insert requires at least one column", field="columns")
        if len(columns) != len(values):
            raise invalid_input_error(
                f"Column count ({len(columns)}) does not match value count ({len(values)})",
                field="values",
                details={"columns": len(columns), "values": len(values)},
            )

        table_sql = escape_table_reference(table)
        column_sql = ", ".join(validate_identifier(column, "column name") for column in columns)
        placeholders = ", ".join("?" for _ in columns)
        return QuerySpec(
            sql_text=f"INSERT INTO {table_sql} ({column_sql}) VALUES ({placeholders})",
            parameters=list(values),
        )

    def build_delete(
        self,
        table: TableReference,
        primary_key_column: str,
        primary_key_value: Any,
    ) -> QuerySpec:
        """Build ``DELETE FROM t WHERE "pk" = ?``."""
        table_sql = escape_table_reference(table)
        pk_sql = validate_identifier(primary_key_column, "primary key column")
        return QuerySpec(
            sql_text=f"DELETE FROM {table_sql} WHERE {pk_sql} = ?",
            parameters=[primary_key_value],
        )

    def build_query(self, query_type: QueryType, **kwargs: Any) -> QuerySpec:
        """Build a query by statement kind.

        Args:
            query_type: Statement kind
            **kwargs: Arguments of the matching ``build_*`` method

        Raises:
            NotImplementedError: If the statement kind is not supported
        """
        operation_mapping = {
            QueryType.SELECT_PAGE: self.build_page_query,
            QueryType.COUNT: self.build_count_query,
            QueryType.INSERT: self.build_insert,
            QueryType.UPDATE: self.build_update,
            QueryType.DELETE: self.build_delete,
            QueryType.CATALOG_TABLES: self.build_tables_catalog_query,
            QueryType.CATALOG_COLUMNS: self.build_columns_catalog_query,
            QueryType.CATALOG_PRIMARY_KEY: self.build_primary_key_query,
        }

        builder_method = operation_mapping.get(query_type)
        if builder_method:
            return builder_method(**kwargs)

        raise NotImplementedError(
            f"Query type {query_type} not supported by {self.__class__.__name__}"
        )
