"""Catalog metadata for gridsql."""

from gridsql.metadata.cache import TTLSchemaCache
from gridsql.metadata.service import MetadataService, parse_column_row

__all__ = [
    "MetadataService",
    "TTLSchemaCache",
    "parse_column_row",
]
