"""Public CRUD and export surface of the engine.

Each operation validates identifiers and inputs up front (raising
``GridSQLError`` before any request), builds a ``QuerySpec`` through the
query builder and hands it to the transport. Transport and remote
failures come back as ``OperationResult.error``; the executor never
retries.
"""

import threading
import time
from typing import Any, Callable, Iterator, List, Optional, Sequence, Union

from gridsql.common.exceptions import ErrorCode, GridSQLError, cancelled_error, invalid_input_error
from gridsql.constants import COUNT_ALIAS
from gridsql.engine.export import convert_rows
from gridsql.logging import get_logger
from gridsql.protocols import TransportClient
from gridsql.query_builder import BaseQueryBuilder, IrisQueryBuilder
from gridsql.settings import _Settings, get_settings
from gridsql.types import (
    Credentials,
    ExportBatch,
    ExportProgress,
    FilterCriterion,
    OperationResult,
    PageRequest,
    QueryResult,
    QuerySpec,
    ServerSpec,
    SortSpec,
    TableReference,
    TableSchema,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[ExportProgress], None]


def resolve_tiebreaker(schema: TableSchema) -> Optional[str]:
    """Pick the column that makes page order deterministic.

    The primary key when known, else the first identity column, else
    None. Generated columns never qualify.
    """
    if schema.primary_key and schema.has_column(schema.primary_key):
        return schema.primary_key
    identity = schema.identity_columns
    if identity:
        return identity[0].name
    logger.warning(
        "No primary key or identity column; paging order may be unstable",
        extra={"table": schema.table.qualified_name},
    )
    return None


class QueryExecutor:
    """Runs page fetches, edits, counts and exports against one transport.

    The executor is stateless: concurrent calls share nothing but the
    transport and the (read-only) settings.

    Example:
        >>> executor = QueryExecutor(AtelierTransport())
        >>> result = executor.fetch_page(
        ...     server, "USER", creds, "SQLUser.Employees", schema,
        ...     PageRequest(page_size_rows=50, zero_indexed_page_offset=2),
        ... )
        >>> result.data.total_matching_row_count
        127
    """

    def __init__(
        self,
        transport: TransportClient,
        query_builder: Optional[BaseQueryBuilder] = None,
        settings: Optional[_Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.query_builder = query_builder or IrisQueryBuilder(self.settings)

    def fetch_page(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        schema: TableSchema,
        page: PageRequest,
        filters: Optional[Sequence[FilterCriterion]] = None,
        sort: Optional[SortSpec] = None,
        include_count: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Fetch one page of rows plus the total matching row count.

        The count runs as a second, independent query; when it fails the
        page is still returned with ``total_matching_row_count == 0``. A
        cancelled count fails the whole call with CANCELLED.

        Raises:
            GridSQLError: INVALID_IDENTIFIER or INVALID_INPUT (page size
                above ``max_page_size``, schema without columns).
        """
        table = self._resolve_table(table)
        self._check_page_size(page.page_size_rows)

        page_query = self.query_builder.build_page_query(
            table, schema, page, filters, sort, resolve_tiebreaker(schema)
        )
        count_query = self.query_builder.build_count_query(table, schema, filters) if include_count else None

        logger.debug(
            "Fetching page",
            extra={
                "table": table.qualified_name,
                "page_size": page.page_size_rows,
                "page_offset": page.zero_indexed_page_offset,
                "filters": len(filters or []),
                "sort": sort.column if sort is not None and sort.is_active else None,
            },
        )

        start_time = time.time()
        try:
            rows = self._run(server, namespace, credentials, page_query, cancel_event)
        except GridSQLError as exc:
            return self._failure(exc, "fetch_page", start_time)

        total = 0
        if count_query is not None:
            try:
                total = self._count_or_zero(server, namespace, credentials, count_query, cancel_event)
            except GridSQLError as exc:
                return self._failure(exc, "fetch_page", start_time)

        duration = time.time() - start_time
        logger.info(
            "Page fetched",
            extra={
                "table": table.qualified_name,
                "rows": len(rows),
                "total": total,
                "duration.seconds": f"{duration:.6f}",
            },
        )
        return OperationResult.ok(
            QueryResult(
                rows=rows,
                total_matching_row_count=total,
                page_size_rows=page.page_size_rows,
                zero_indexed_page_offset=page.zero_indexed_page_offset,
            ),
            duration_seconds=duration,
        )

    def count_rows(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        schema: TableSchema,
        filters: Optional[Sequence[FilterCriterion]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Count rows matching the filters.

        Unlike the count inside ``fetch_page``, a failure is reported.
        """
        table = self._resolve_table(table)
        query = self.query_builder.build_count_query(table, schema, filters)

        start_time = time.time()
        try:
            rows = self._run(server, namespace, credentials, query, cancel_event)
            total = self._extract_count(rows)
        except GridSQLError as exc:
            return self._failure(exc, "count_rows", start_time)

        return OperationResult.ok(total, duration_seconds=time.time() - start_time)

    def update_cell(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        column: str,
        new_value: Any,
        primary_key_column: str,
        primary_key_value: Any,
        schema: Optional[TableSchema] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Set one cell, addressing the row by primary key.

        There is no check that the row is unchanged since it was read.

        Raises:
            GridSQLError: INVALID_IDENTIFIER, or INVALID_INPUT when
                ``schema`` is given and the column is unknown or read-only.
        """
        table = self._resolve_table(table)
        if schema is not None:
            self._check_writable(schema, [column])
        query = self.query_builder.build_update(
            table, column, new_value, primary_key_column, primary_key_value
        )

        logger.debug(
            "Updating cell",
            extra={"table": table.qualified_name, "column": column, "primary_key_column": primary_key_column},
        )
        return self._write(server, namespace, credentials, query, cancel_event, "update_cell", rows_affected=1)

    def insert_row(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        columns: Sequence[str],
        values: Sequence[Any],
        schema: Optional[TableSchema] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Insert one row.

        Raises:
            GridSQLError: INVALID_INPUT when ``columns`` is empty or its
                length differs from ``values``, or when ``schema`` is given
                and a column is unknown or read-only.
        """
        table = self._resolve_table(table)
        query = self.query_builder.build_insert(table, columns, values)
        if schema is not None:
            self._check_writable(schema, columns)

        logger.debug("Inserting row", extra={"table": table.qualified_name, "column_count": len(columns)})
        return self._write(server, namespace, credentials, query, cancel_event, "insert_row")

    def delete_row(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        primary_key_column: str,
        primary_key_value: Any,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Delete the row whose primary key equals ``primary_key_value``."""
        table = self._resolve_table(table)
        query = self.query_builder.build_delete(table, primary_key_column, primary_key_value)

        logger.debug(
            "Deleting row",
            extra={"table": table.qualified_name, "primary_key_column": primary_key_column},
        )
        return self._write(server, namespace, credentials, query, cancel_event, "delete_row")

    def export_all_matching(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: Union[TableReference, str],
        schema: TableSchema,
        filters: Optional[Sequence[FilterCriterion]] = None,
        sort: Optional[SortSpec] = None,
        chunk_size_rows: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[ExportBatch]:
        """Lazily export every matching row in fixed-size chunks.

        Chunks are fetched sequentially with increasing page offset until
        one comes back short. The matching row count is fetched once, with
        the first chunk. Cells are converted with ``convert_for_export``.
        ``progress_callback`` runs after every non-empty batch.

        A failed or cancelled chunk produces one final batch with ``error``
        set. The returned iterator is single-use: iterating it again
        yields nothing.

        Raises:
            GridSQLError: INVALID_IDENTIFIER or INVALID_INPUT, immediately
                rather than on first iteration.
        """
        table = self._resolve_table(table)
        chunk_size = chunk_size_rows if chunk_size_rows is not None else self.settings.query.export_chunk_size
        first_page = PageRequest(page_size_rows=chunk_size, zero_indexed_page_offset=0)
        self._check_page_size(chunk_size)
        # Validate eagerly; the generator body only runs on first next()
        self.query_builder.build_page_query(table, schema, first_page, filters, sort)
        self.query_builder.build_count_query(table, schema, filters)

        return self._export_batches(
            server, namespace, credentials, table, schema, filters, sort,
            chunk_size, progress_callback, cancel_event,
        )

    def _export_batches(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        table: TableReference,
        schema: TableSchema,
        filters: Optional[Sequence[FilterCriterion]],
        sort: Optional[SortSpec],
        chunk_size: int,
        progress_callback: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> Iterator[ExportBatch]:
        batch_index = 0
        rows_so_far = 0
        total = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                error = cancelled_error(details={"rows_so_far": rows_so_far})
                yield ExportBatch(
                    batch_index=batch_index,
                    rows_so_far=rows_so_far,
                    total_matching_row_count=total,
                    error=error.to_error_info("export_all_matching"),
                )
                return

            page = PageRequest(page_size_rows=chunk_size, zero_indexed_page_offset=batch_index)
            result = self.fetch_page(
                server, namespace, credentials, table, schema, page, filters, sort,
                include_count=batch_index == 0,
                cancel_event=cancel_event,
            )
            if not result.success:
                error = result.error.model_copy(update={"context": "export_all_matching"})
                yield ExportBatch(
                    batch_index=batch_index,
                    rows_so_far=rows_so_far,
                    total_matching_row_count=total,
                    error=error,
                )
                return

            if batch_index == 0:
                total = result.data.total_matching_row_count

            rows = result.data.rows
            if rows:
                rows_so_far += len(rows)
                batch = ExportBatch(
                    batch_index=batch_index,
                    rows=convert_rows(rows, schema),
                    rows_so_far=rows_so_far,
                    total_matching_row_count=total,
                )
                if progress_callback is not None:
                    progress_callback(batch.progress)
                yield batch

            if len(rows) < chunk_size:
                logger.info(
                    "Export finished",
                    extra={"table": table.qualified_name, "rows": rows_so_far, "chunks": batch_index + 1},
                )
                return

            batch_index += 1

    def _resolve_table(self, table: Union[TableReference, str]) -> TableReference:
        if isinstance(table, TableReference):
            return table
        return self.query_builder.parse_table(table)

    def _check_page_size(self, page_size: int) -> None:
        max_page_size = self.settings.query.max_page_size
        if page_size > max_page_size:
            raise invalid_input_error(
                f"Page size {page_size} exceeds the maximum of {max_page_size}",
                field="page_size_rows",
            )

    @staticmethod
    def _check_writable(schema: TableSchema, columns: Sequence[str]) -> None:
        for name in columns:
            column = schema.get_column(name)
            if column is None:
                raise invalid_input_error(
                    f"Column \"{name}\" does not exist in {schema.table.qualified_name}",
                    field=name,
                )
            if column.is_read_only:
                raise invalid_input_error(f"Column \"{name}\" is read-only", field=name)

    def _run(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        query: QuerySpec,
        cancel_event: Optional[threading.Event],
    ) -> List[dict]:
        logger.debug("Executing SQL", extra={"sql": query.sql_text, "parameter_count": len(query.parameters)})
        return self.transport.execute(
            server, namespace, credentials, query.sql_text, query.parameters, cancel_event
        )

    def _count_or_zero(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        query: QuerySpec,
        cancel_event: Optional[threading.Event],
    ) -> int:
        """Run the count query, reporting 0 when it fails.

        Cancellation is re-raised so the whole fetch reports CANCELLED.
        """
        try:
            return self._extract_count(self._run(server, namespace, credentials, query, cancel_event))
        except GridSQLError as exc:
            if exc.error_code is ErrorCode.CANCELLED:
                raise
            logger.debug("Row count failed, reporting 0", extra={"error_code": exc.error_code.value})
            return 0

    @staticmethod
    def _extract_count(rows: List[dict]) -> int:
        if not rows:
            return 0
        row = rows[0]
        value = row.get(COUNT_ALIAS)
        if value is None:
            # Some servers upper-case the alias
            value = next((v for k, v in row.items() if k.lower() == COUNT_ALIAS), 0)
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            raise GridSQLError(
                f"Row count is not a number: {value!r}",
                error_code=ErrorCode.INVALID_RESPONSE,
            )

    def _write(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        query: QuerySpec,
        cancel_event: Optional[threading.Event],
        context: str,
        rows_affected: Optional[int] = None,
    ) -> OperationResult:
        start_time = time.time()
        try:
            self._run(server, namespace, credentials, query, cancel_event)
        except GridSQLError as exc:
            return self._failure(exc, context, start_time)

        duration = time.time() - start_time
        logger.info(f"{context} succeeded", extra={"duration.seconds": f"{duration:.6f}"})
        return OperationResult.ok(rows_affected=rows_affected, duration_seconds=duration)

    @staticmethod
    def _failure(exc: GridSQLError, context: str, start_time: float) -> OperationResult:
        return OperationResult.fail(
            exc.to_error_info(context),
            duration_seconds=time.time() - start_time,
        )
