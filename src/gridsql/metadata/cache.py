"""In-memory TTL cache for table schemas."""

import fnmatch
import threading
import time
from typing import Any, Dict, Optional

from gridsql.logging import get_logger
from gridsql.types import TableSchema

logger = get_logger(__name__)


class TTLSchemaCache:
    """Schema cache with optional TTL and glob-pattern clearing.

    Instances are owned by whoever injects them into a MetadataService;
    there is no module-level cache.

    Example:
        >>> cache = TTLSchemaCache(default_ttl=300)
        >>> service = MetadataService(transport, cache=cache)
        >>> cache.clear("schema:dev:USER:*")
    """

    def __init__(self, default_ttl: Optional[float] = None):
        self.default_ttl = default_ttl
        self._storage: Dict[str, TableSchema] = {}
        self._ttl_storage: Dict[str, float] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(server_name: str, namespace: str, qualified_table: str) -> str:
        return f"schema:{server_name}:{namespace}:{qualified_table}"

    def get(self, key: str) -> Optional[TableSchema]:
        """Get a cached schema, or None when absent or expired."""
        with self._lock:
            if self._is_cached(key):
                self._hits += 1
                logger.debug("Schema cache hit", extra={"cache_key": key})
                return self._storage[key]
            self._misses += 1
            return None

    def set(self, key: str, value: TableSchema, ttl: Optional[float] = None) -> None:
        """Store a schema.

        Args:
            key: Cache key
            value: Schema to cache
            ttl: Time-to-live in seconds; falls back to ``default_ttl``
        """
        ttl = ttl if ttl is not None else self.default_ttl
        with self._lock:
            self._storage[key] = value
            if ttl:
                self._ttl_storage[key] = time.monotonic() + ttl
            else:
                self._ttl_storage.pop(key, None)
        logger.debug("Cached schema", extra={"cache_key": key, "ttl": ttl})

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._delete(key)

    def clear(self, pattern: str = "*") -> int:
        """Clear keys matching a glob pattern.

        Returns:
            Number of keys cleared
        """
        with self._lock:
            if pattern == "*":
                count = len(self._storage)
                self._storage.clear()
                self._ttl_storage.clear()
            else:
                keys_to_delete = [key for key in self._storage if fnmatch.fnmatch(key, pattern)]
                for key in keys_to_delete:
                    self._delete(key)
                count = len(keys_to_delete)

        logger.info(f"Cleared {count} schema cache entries matching '{pattern}'")
        return count

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_keys": len(self._storage),
                "keys_with_ttl": len(self._ttl_storage),
                "hits": self._hits,
                "misses": self._misses,
            }

    def _delete(self, key: str) -> bool:
        if key not in self._storage:
            return False
        del self._storage[key]
        self._ttl_storage.pop(key, None)
        return True

    def _is_cached(self, key: str) -> bool:
        if key not in self._storage:
            return False

        expires_at = self._ttl_storage.get(key)
        if expires_at is not None and time.monotonic() >= expires_at:
            self._delete(key)
            return False

        return True
