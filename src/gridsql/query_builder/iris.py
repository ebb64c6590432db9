"""InterSystems IRIS query builder implementation."""

from typing import Optional

from gridsql.constants import ROW_ORDINAL_COLUMN
from gridsql.query_builder.base import BaseQueryBuilder
from gridsql.settings import _Settings
from gridsql.types import QuerySpec, TableReference


class IrisQueryBuilder(BaseQueryBuilder):
    """Query builder for InterSystems IRIS SQL.

    Key Features:
        - Double-quoted delimited identifiers
        - ``TOP n`` with ``%VID`` windowing instead of OFFSET
        - ``INFORMATION_SCHEMA`` catalog views, always filtered by bound
          parameters
    """

    def __init__(self, settings: Optional[_Settings] = None):
        if settings is None:
            from gridsql.settings import get_settings
            settings = get_settings()
        super().__init__(settings)

    @property
    def row_ordinal_column(self) -> str:
        return ROW_ORDINAL_COLUMN

    def build_tables_catalog_query(self) -> QuerySpec:
        return QuerySpec(
            sql_text=(
                "SELECT TABLE_SCHEMA, TABLE_NAME "
                "FROM INFORMATION_SCHEMA.TABLES "
                "WHERE TABLE_TYPE = 'BASE TABLE' "
                "ORDER BY TABLE_SCHEMA, TABLE_NAME"
            ),
            parameters=[],
        )

    def build_columns_catalog_query(self, table: TableReference) -> QuerySpec:
        # Names are bound even though they came from a catalog listing
        return QuerySpec(
            sql_text=(
                "SELECT COLUMN_NAME, DATA_TYPE, IS_NULLABLE, CHARACTER_MAXIMUM_LENGTH, "
                "NUMERIC_PRECISION, NUMERIC_SCALE, IS_IDENTITY, IS_GENERATED "
                "FROM INFORMATION_SCHEMA.COLUMNS "
                "WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ? "
                "ORDER BY ORDINAL_POSITION"
            ),
            parameters=[table.schema_name, table.name],
        )

    def build_primary_key_query(self, table: TableReference) -> QuerySpec:
        return QuerySpec(
            sql_text=(
                "SELECT kcu.COLUMN_NAME "
                "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc "
                "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu "
                "ON tc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA "
                "AND tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME "
                "WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY' "
                "AND tc.TABLE_SCHEMA = ? AND tc.TABLE_NAME = ? "
                "ORDER BY kcu.ORDINAL_POSITION"
            ),
            parameters=[table.schema_name, table.name],
        )
