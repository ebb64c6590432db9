"""Transport protocol definitions.

The engine never performs HTTP itself: it builds QuerySpecs and hands them
to an object satisfying ``TransportClient``. Implementations raise
``GridSQLError`` carrying a transport error code (AUTH_FAILED,
TRANSPORT_FAILED, SERVER_UNREACHABLE, TIMEOUT_ERROR, CANCELLED,
REMOTE_QUERY_ERROR, INVALID_RESPONSE) on failure.
"""

import threading
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from gridsql.types import Credentials, ServerSpec


@runtime_checkable
class TransportClient(Protocol):
    """Protocol for clients able to run parameterized SQL on a server."""

    def execute(
        self,
        server: ServerSpec,
        namespace: str,
        credentials: Credentials,
        sql_text: str,
        parameters: Sequence[Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Dict[str, Any]]:
        """Run one statement and return its rows.

        Rows preserve the remote result set's column names and row order.
        Statements without a result set return an empty list.
        """
        ...

    def describe_server(
        self,
        server: ServerSpec,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """Return the server's self-description (including ``namespaces``)."""
        ...
