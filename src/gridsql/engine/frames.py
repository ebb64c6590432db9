"""pandas helpers for exported batches."""

from typing import Iterable

import pandas as pd

from gridsql.common.exceptions import GridSQLError, ErrorCode
from gridsql.constants import ColumnCategory
from gridsql.types import ExportBatch, TableSchema

_PANDAS_DTYPES = {
    ColumnCategory.BOOLEAN: "boolean",
    ColumnCategory.INTEGER: "Int64",
    ColumnCategory.DECIMAL: "Float64",
}


def batches_to_dataframe(
    schema: TableSchema,
    batches: Iterable[ExportBatch],
    raise_on_error: bool = True,
) -> pd.DataFrame:
    """Collect export batches into a DataFrame.

    Columns follow the schema's ordinal order. Boolean and numeric columns
    get nullable pandas dtypes when every value converted cleanly; columns
    holding fallback raw strings stay ``object``.

    Args:
        schema: Schema the batches were exported with
        batches: Iterator returned by ``QueryExecutor.export_all_matching``
        raise_on_error: Raise the terminal batch's error instead of
            returning the rows collected so far

    Raises:
        GridSQLError: When a terminal error batch is seen and
            ``raise_on_error`` is set.
    """
    rows = []
    for batch in batches:
        if batch.error is not None:
            if raise_on_error:
                raise GridSQLError(
                    batch.error.message,
                    error_code=ErrorCode(batch.error.code),
                    details={**batch.error.details, "rows_so_far": batch.rows_so_far},
                )
            break
        rows.extend(batch.rows)

    df = pd.DataFrame.from_records(rows, columns=schema.column_names)

    for column in schema.columns:
        dtype = _PANDAS_DTYPES.get(column.category)
        if dtype is None or df.empty:
            continue
        try:
            df[column.name] = df[column.name].astype(dtype)
        except (TypeError, ValueError):
            continue

    return df
