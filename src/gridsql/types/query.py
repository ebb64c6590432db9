"""Request-side value objects: filters, sort, page window and built queries."""

from typing import Any, List

from pydantic import ConfigDict, Field, field_validator

from gridsql.common.exceptions import invalid_input_error
from gridsql.constants import SortDirection
from gridsql.types.base import GridBaseModel


class FilterCriterion(GridBaseModel):
    """A per-column wildcard filter.

    ``pattern`` understands two wildcards: ``*`` for any run of characters
    and ``?`` for exactly one. Matching is case-insensitive and several
    criteria combine with AND.
    """
    model_config = ConfigDict(frozen=True)

    column: str
    pattern: str


class SortSpec(GridBaseModel):
    """The single active sort column, if any."""
    model_config = ConfigDict(frozen=True)

    column: str
    direction: SortDirection = SortDirection.ASCENDING

    @classmethod
    def none(cls) -> "SortSpec":
        return cls(column="", direction=SortDirection.NONE)

    @property
    def is_active(self) -> bool:
        return bool(self.column) and self.direction is not SortDirection.NONE


class PageRequest(GridBaseModel):
    """Which window of rows to fetch.

    Attributes:
        page_size_rows: Rows per page, at least 1.
        zero_indexed_page_offset: Page number starting at 0.
    """
    model_config = ConfigDict(frozen=True)

    page_size_rows: int
    zero_indexed_page_offset: int = 0

    @field_validator("page_size_rows", mode="before")
    @classmethod
    def validate_page_size(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise invalid_input_error(
                f"Page size must be a positive integer, got {v!r}",
                field="page_size_rows",
            )
        return v

    @field_validator("zero_indexed_page_offset", mode="before")
    @classmethod
    def validate_page_offset(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise invalid_input_error(
                f"Page offset must be a non-negative integer, got {v!r}",
                field="zero_indexed_page_offset",
            )
        return v

    @property
    def row_offset(self) -> int:
        return self.page_size_rows * self.zero_indexed_page_offset


class QuerySpec(GridBaseModel):
    """SQL text plus its bound parameters.

    This is the only artifact handed to the transport. ``sql_text`` holds
    validated identifiers and ``?`` placeholders, never a raw value.
    """
    model_config = ConfigDict(frozen=True)

    sql_text: str
    parameters: List[Any] = Field(default_factory=list)
