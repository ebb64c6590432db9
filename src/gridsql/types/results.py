"""Result-side value objects returned by the engine's public operations."""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import Field

from gridsql.common.exceptions import ErrorCode
from gridsql.types.base import GridBaseModel

T = TypeVar("T")


class ErrorInfo(GridBaseModel):
    """Structured error carried by a failed operation.

    Attributes:
        code: Machine-readable error category.
        message: Human-readable text; remote SQL errors are passed through.
        recoverable: Whether retrying or correcting input can succeed.
        context: Name of the operation that failed.
        details: Extra diagnostics such as ``status_code``.
    """
    code: ErrorCode
    message: str
    recoverable: bool = True
    context: str = ""
    details: Dict[str, Any] = Field(default_factory=dict)


class OperationResult(GridBaseModel, Generic[T]):
    """Outcome of a network-bound operation.

    Exactly one of ``data`` (on success) or ``error`` (on failure) is
    meaningful. ``rows_affected`` is reported by write operations.
    """
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
    rows_affected: Optional[int] = None
    duration_seconds: float = 0.0

    @classmethod
    def ok(cls, data: Any = None, **kwargs: Any) -> "OperationResult":
        return cls(success=True, data=data, **kwargs)

    @classmethod
    def fail(cls, error: ErrorInfo, **kwargs: Any) -> "OperationResult":
        return cls(success=False, error=error, **kwargs)


class QueryResult(GridBaseModel):
    """One page of rows plus the total count of matching rows.

    ``total_matching_row_count`` is 0 when the count query failed or was
    not requested.
    """
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    total_matching_row_count: int = 0
    page_size_rows: int = 0
    zero_indexed_page_offset: int = 0


class ExportProgress(GridBaseModel):
    """Cumulative progress of an export."""
    rows_so_far: int
    total_matching_row_count: int

    @property
    def fraction(self) -> float:
        if self.total_matching_row_count <= 0:
            return 0.0
        return min(1.0, self.rows_so_far / self.total_matching_row_count)


class ExportBatch(GridBaseModel):
    """A chunk of converted rows yielded by an export.

    A batch with ``error`` set is terminal: no further batches follow it.
    """
    batch_index: int
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    rows_so_far: int = 0
    total_matching_row_count: int = 0
    error: Optional[ErrorInfo] = None

    @property
    def is_terminal_error(self) -> bool:
        return self.error is not None

    @property
    def progress(self) -> ExportProgress:
        return ExportProgress(
            rows_so_far=self.rows_so_far,
            total_matching_row_count=self.total_matching_row_count,
        )
