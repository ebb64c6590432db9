"""Query execution and export for gridsql."""

from gridsql.engine.executor import QueryExecutor, resolve_tiebreaker
from gridsql.engine.export import CONVERTERS, convert_for_export, convert_row
from gridsql.engine.frames import batches_to_dataframe

__all__ = [
    "QueryExecutor",
    "resolve_tiebreaker",
    "CONVERTERS",
    "convert_for_export",
    "convert_row",
    "batches_to_dataframe",
]
