"""Table and column descriptors produced by the metadata service."""

from typing import Any, List, Optional

from pydantic import ConfigDict, Field, model_validator

from gridsql.constants import IDENTIFIER_PATTERN, MAX_IDENTIFIER_LENGTH, ColumnCategory, categorize_sql_type
from gridsql.types.base import GridBaseModel


class TableReference(GridBaseModel):
    """A schema-qualified table name.

    Attributes:
        schema_name: Schema segment (``SQLUser`` for unqualified IRIS tables).
        name: Table segment.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_name: str = Field(
        alias="schema",
        pattern=IDENTIFIER_PATTERN,
        max_length=MAX_IDENTIFIER_LENGTH,
    )
    name: str = Field(pattern=IDENTIFIER_PATTERN, max_length=MAX_IDENTIFIER_LENGTH)

    @classmethod
    def parse(cls, display: str, default_schema: Optional[str] = None) -> "TableReference":
        """Parse a ``schema.table`` display string.

        Splits on the first ``.``; without one the default schema is used.
        Raises GridSQLError(INVALID_IDENTIFIER) for malformed segments.
        """
        from gridsql.query_builder.identifiers import parse_qualified_table_name

        if default_schema is None:
            return parse_qualified_table_name(display)
        return parse_qualified_table_name(display, default_schema)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    def __str__(self) -> str:
        return self.qualified_name


class ColumnDescriptor(GridBaseModel):
    """One column of a table as reported by the catalog.

    Attributes:
        name: Column name.
        sql_type: Remote type name, e.g. ``VARCHAR`` or ``INTEGER``.
        nullable: Whether the column accepts NULL.
        max_length: Character maximum length, when reported.
        precision: Numeric precision, when reported.
        scale: Numeric scale, when reported.
        is_read_only: True for identity or generated columns; such columns
            never appear in INSERT or UPDATE column lists.
        is_identity: True only for the identity (row id) column. Implies
            ``is_read_only``.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    sql_type: str
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    is_read_only: bool = False
    is_identity: bool = False

    @model_validator(mode="before")
    @classmethod
    def identity_is_read_only(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("is_identity"):
            data = {**data, "is_read_only": True}
        return data

    @property
    def category(self) -> ColumnCategory:
        return categorize_sql_type(self.sql_type)


class TableSchema(GridBaseModel):
    """Columns of a table in catalog ordinal order.

    Column order is significant: exports and imports align cells by it.
    """
    model_config = ConfigDict(frozen=True)

    table: TableReference
    columns: List[ColumnDescriptor] = Field(default_factory=list)
    primary_key: Optional[str] = None

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    @property
    def writable_columns(self) -> List[ColumnDescriptor]:
        return [column for column in self.columns if not column.is_read_only]

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    @property
    def identity_columns(self) -> List[ColumnDescriptor]:
        return [column for column in self.columns if column.is_identity]
