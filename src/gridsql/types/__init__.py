"""Type definitions for gridsql.

Value objects are request-scoped: created per call, never mutated after
construction and never shared across concurrent calls.
"""

from .base import GridBaseModel
from .query import FilterCriterion, PageRequest, QuerySpec, SortSpec
from .results import (
    ErrorInfo,
    ExportBatch,
    ExportProgress,
    OperationResult,
    QueryResult,
)
from .schema import ColumnDescriptor, TableReference, TableSchema
from .server import Credentials, ServerSpec

__all__ = [
    'GridBaseModel',
    # Schema
    'TableReference',
    'ColumnDescriptor',
    'TableSchema',
    # Requests
    'FilterCriterion',
    'SortSpec',
    'PageRequest',
    'QuerySpec',
    # Results
    'QueryResult',
    'ErrorInfo',
    'OperationResult',
    'ExportBatch',
    'ExportProgress',
    # Connection
    'ServerSpec',
    'Credentials',
]
