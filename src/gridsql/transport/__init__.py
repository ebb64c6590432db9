"""Transport clients for gridsql."""

from gridsql.transport.atelier import AtelierTransport
from gridsql.transport.urls import build_base_url, build_query_url

__all__ = [
    "AtelierTransport",
    "build_base_url",
    "build_query_url",
]
