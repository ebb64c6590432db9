"""Tests for the in-memory schema cache."""

from unittest.mock import patch

from gridsql.metadata import TTLSchemaCache
from gridsql.types import TableReference, TableSchema


def _schema(name: str) -> TableSchema:
    return TableSchema(table=TableReference(schema="SQLUser", name=name))


class TestTTLSchemaCache:
    """Test get/set, TTL expiry and pattern clearing."""

    def test_get_and_set(self):
        cache = TTLSchemaCache()
        cache.set("schema:dev:USER:SQLUser.A", _schema("A"))

        assert cache.get("schema:dev:USER:SQLUser.A").table.name == "A"
        assert cache.get("schema:dev:USER:SQLUser.B") is None
        assert cache.get_stats()["hits"] == 1
        assert cache.get_stats()["misses"] == 1

    def test_ttl_expiry(self):
        cache = TTLSchemaCache(default_ttl=10)
        with patch("gridsql.metadata.cache.time.monotonic", return_value=100.0):
            cache.set("k", _schema("A"))
        with patch("gridsql.metadata.cache.time.monotonic", return_value=105.0):
            assert cache.get("k") is not None
        with patch("gridsql.metadata.cache.time.monotonic", return_value=110.0):
            assert cache.get("k") is None
        assert cache.get_stats()["total_keys"] == 0

    def test_clear_by_pattern(self):
        cache = TTLSchemaCache()
        cache.set(TTLSchemaCache.make_key("dev", "USER", "SQLUser.A"), _schema("A"))
        cache.set(TTLSchemaCache.make_key("dev", "USER", "SQLUser.B"), _schema("B"))
        cache.set(TTLSchemaCache.make_key("prod", "USER", "SQLUser.A"), _schema("A"))

        assert cache.clear("schema:dev:*") == 2
        assert cache.get_stats()["total_keys"] == 1
        assert cache.clear() == 1

    def test_delete(self):
        cache = TTLSchemaCache()
        cache.set("k", _schema("A"), ttl=60)
        assert cache.delete("k")
        assert not cache.delete("k")
        assert cache.get_stats()["keys_with_ttl"] == 0
