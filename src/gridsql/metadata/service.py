"""Catalog access: namespaces, tables and table schemas.

Every public method returns an ``OperationResult``. Identifier problems
are raised as ``GridSQLError`` before any request is sent; transport and
remote failures come back as ``OperationResult.error``.
"""

import threading
import time
from typing import Any, Dict, List, Optional, Union

from gridsql.common.exceptions import ErrorCode, GridSQLError
from gridsql.logging import get_logger
from gridsql.protocols import SchemaCache, TransportClient
from gridsql.query_builder import BaseQueryBuilder, IrisQueryBuilder, is_valid_identifier
from gridsql.settings import _Settings, get_settings
from gridsql.types import (
    ColumnDescriptor,
    Credentials,
    OperationResult,
    ServerSpec,
    TableReference,
    TableSchema,
)

logger = get_logger(__name__)


def _is_yes(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return isinstance(value, str) and value.strip().upper() in ("YES", "1", "TRUE")


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_column_row(row: Any) -> Optional[ColumnDescriptor]:
    """Turn one INFORMATION_SCHEMA.COLUMNS row into a descriptor.

    Returns None for rows without a usable name or type.
    """
    if not isinstance(row, dict):
        logger.debug("Skipping column row: not an object")
        return None

    name = row.get("COLUMN_NAME")
    if not isinstance(name, str) or not is_valid_identifier(name):
        logger.debug("Skipping column row with invalid COLUMN_NAME", extra={"column": name})
        return None

    sql_type = row.get("DATA_TYPE")
    if not isinstance(sql_type, str) or not sql_type.strip():
        logger.debug("Skipping column row with invalid DATA_TYPE", extra={"column": name})
        return None

    return ColumnDescriptor(
        name=name.strip(),
        sql_type=sql_type.strip(),
        nullable=_is_yes(row.get("IS_NULLABLE")),
        max_length=_optional_int(row.get("CHARACTER_MAXIMUM_LENGTH")),
        precision=_optional_int(row.get("NUMERIC_PRECISION")),
        scale=_optional_int(row.get("NUMERIC_SCALE")),
        is_read_only=_is_yes(row.get("IS_GENERATED")),
        is_identity=_is_yes(row.get("IS_IDENTITY")),
    )


class MetadataService:
    """Reads namespaces, tables and column metadata through a transport.

    The catalog is treated as ground truth and read fresh on every call
    unless a ``SchemaCache`` is injected.

    Example:
        >>> service = MetadataService(AtelierTransport())
        >>> result = service.get_table_schema(server, "USER", "SQLUser.Employees", creds)
        >>> if result.success:
        ...     result.data.column_names
    """

    def __init__(
        self,
        transport: TransportClient,
        query_builder: Optional[BaseQueryBuilder] = None,
        settings: Optional[_Settings] = None,
        cache: Optional[SchemaCache] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.query_builder = query_builder or IrisQueryBuilder(self.settings)
        self.cache = cache

    def test_connection(
        self,
        server: ServerSpec,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """Round trip to the API root.

        ``data`` carries the API version and namespace count on success.
        """
        start_time = time.time()
        try:
            descriptor = self.transport.describe_server(server, credentials, cancel_event)
        except GridSQLError as exc:
            return self._failure(exc, "test_connection", start_time)

        namespaces = descriptor.get("namespaces") or []
        info = {
            "api": descriptor.get("api"),
            "version": descriptor.get("version"),
            "namespace_count": len(namespaces),
        }
        logger.info("Connection test succeeded", extra={"server": server.name, **info})
        return OperationResult.ok(info, duration_seconds=time.time() - start_time)

    def get_namespaces(
        self,
        server: ServerSpec,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """List the namespaces the server reports, unfiltered."""
        start_time = time.time()
        try:
            descriptor = self.transport.describe_server(server, credentials, cancel_event)
        except GridSQLError as exc:
            return self._failure(exc, "get_namespaces", start_time)

        namespaces = [ns for ns in (descriptor.get("namespaces") or []) if isinstance(ns, str)]
        logger.debug("Retrieved namespaces", extra={"server": server.name, "count": len(namespaces)})
        return OperationResult.ok(namespaces, duration_seconds=time.time() - start_time)

    def get_tables(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResult:
        """List base tables ordered by schema then name.

        Rows with missing or malformed names are skipped.
        """
        start_time = time.time()
        spec = self.query_builder.build_tables_catalog_query()
        try:
            rows = self.transport.execute(
                server, namespace, credentials, spec.sql_text, spec.parameters, cancel_event
            )
        except GridSQLError as exc:
            return self._failure(exc, "get_tables", start_time)

        tables: List[TableReference] = []
        for row in rows:
            schema_name = row.get("TABLE_SCHEMA")
            table_name = row.get("TABLE_NAME")
            if not (is_valid_identifier(schema_name) and is_valid_identifier(table_name)):
                logger.debug(
                    "Skipping catalog row with invalid table name",
                    extra={"schema_name": schema_name, "table_name": table_name},
                )
                continue
            tables.append(TableReference(schema=schema_name.strip(), name=table_name.strip()))

        logger.debug("Retrieved tables", extra={"namespace": namespace, "count": len(tables)})
        return OperationResult.ok(tables, duration_seconds=time.time() - start_time)

    def get_table_schema(
        self,
        server: ServerSpec,
        namespace: str,
        table: Union[TableReference, str],
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
        use_cache: bool = True,
    ) -> OperationResult:
        """Fetch a table's columns in ordinal order, plus its primary key.

        Raises:
            GridSQLError: INVALID_IDENTIFIER for a malformed table name.
        """
        if isinstance(table, str):
            table = self.query_builder.parse_table(table)
        columns_query = self.query_builder.build_columns_catalog_query(table)

        cache_key = None
        if self.cache is not None:
            cache_key = f"schema:{server.name}:{namespace}:{table.qualified_name}"
            if use_cache:
                cached = self.cache.get(cache_key)
                if cached is not None:
                    return OperationResult.ok(cached, duration_seconds=0.0)

        start_time = time.time()
        try:
            rows = self.transport.execute(
                server,
                namespace,
                credentials,
                columns_query.sql_text,
                columns_query.parameters,
                cancel_event,
            )
            columns = [column for column in map(parse_column_row, rows) if column is not None]
            primary_key = self._lookup_primary_key(server, namespace, table, credentials, cancel_event)
        except GridSQLError as exc:
            return self._failure(exc, "get_table_schema", start_time)

        if primary_key is not None and not any(column.name == primary_key for column in columns):
            primary_key = None

        schema = TableSchema(table=table, columns=columns, primary_key=primary_key)
        if self.cache is not None and cache_key is not None:
            self.cache.set(cache_key, schema)

        duration = time.time() - start_time
        logger.info(
            "Table schema fetched",
            extra={
                "table": table.qualified_name,
                "columns": len(columns),
                "primary_key": primary_key,
                "duration.seconds": f"{duration:.6f}",
            },
        )
        return OperationResult.ok(schema, duration_seconds=duration)

    def _lookup_primary_key(
        self,
        server: ServerSpec,
        namespace: str,
        table: TableReference,
        credentials: Credentials,
        cancel_event: Optional[threading.Event],
    ) -> Optional[str]:
        """Return the single primary key column, or None.

        Composite keys and lookup failures both yield None; cancellation
        is re-raised.
        """
        spec = self.query_builder.build_primary_key_query(table)
        try:
            rows = self.transport.execute(
                server, namespace, credentials, spec.sql_text, spec.parameters, cancel_event
            )
        except GridSQLError as exc:
            if exc.error_code is ErrorCode.CANCELLED:
                raise
            logger.warning(
                "Primary key lookup failed, continuing without one",
                extra={"table": table.qualified_name, "error_code": exc.error_code.value},
            )
            return None

        names = [row.get("COLUMN_NAME") for row in rows if is_valid_identifier(row.get("COLUMN_NAME"))]
        if len(names) != 1:
            if len(names) > 1:
                logger.debug("Composite primary key ignored", extra={"table": table.qualified_name})
            return None
        return names[0].strip()

    @staticmethod
    def _failure(exc: GridSQLError, context: str, start_time: float) -> OperationResult:
        return OperationResult.fail(
            exc.to_error_info(context),
            duration_seconds=time.time() - start_time,
        )
