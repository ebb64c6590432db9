"""gridsql: query construction, pagination and metadata engine for browsing
and editing tables through an HTTP SQL endpoint.

Quick Start:
    >>> from gridsql import AtelierTransport, MetadataService, QueryExecutor
    >>> from gridsql.types import Credentials, PageRequest, ServerSpec
    >>> transport = AtelierTransport()
    >>> server = ServerSpec(name="dev", host="localhost", port=52773)
    >>> creds = Credentials(username="_SYSTEM", password="SYS")
    >>> schema = MetadataService(transport).get_table_schema(
    ...     server, "USER", "SQLUser.Employees", creds
    ... ).data
    >>> page = QueryExecutor(transport).fetch_page(
    ...     server, "USER", creds, schema.table, schema, PageRequest(page_size_rows=50)
    ... )
"""

from gridsql.__version__ import __version__
from gridsql.common.exceptions import ErrorCode, GridSQLError
from gridsql.engine import QueryExecutor, batches_to_dataframe, convert_for_export
from gridsql.metadata import MetadataService, TTLSchemaCache
from gridsql.transport import AtelierTransport

__all__ = [
    "__version__",
    "ErrorCode",
    "GridSQLError",
    "QueryExecutor",
    "MetadataService",
    "TTLSchemaCache",
    "AtelierTransport",
    "batches_to_dataframe",
    "convert_for_export",
]
