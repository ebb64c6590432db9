"""Protocol definitions for gridsql.

Protocols provide type-safe interfaces without requiring inheritance,
following Python's structural subtyping (duck typing with type hints).
"""

from .cache import SchemaCache
from .transport import TransportClient

__all__ = [
    "SchemaCache",
    "TransportClient",
]
