"""Cache policy protocol for table schemas."""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from gridsql.types import TableSchema


@runtime_checkable
class SchemaCache(Protocol):
    """Protocol for an injectable table schema cache.

    The metadata service fetches the catalog fresh on every call unless
    an object implementing this protocol is handed to it.
    """

    def get(self, key: str) -> Optional[TableSchema]:
        """Return the cached schema or None on a miss."""
        ...

    def set(self, key: str, value: TableSchema, ttl: Optional[float] = None) -> None:
        """Store a schema with an optional time-to-live in seconds."""
        ...

    def delete(self, key: str) -> bool:
        """Remove one entry."""
        ...

    def clear(self, pattern: str = "*") -> int:
        """Remove entries matching a glob pattern."""
        ...

    def get_stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        ...
