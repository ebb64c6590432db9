"""Settings module providing configuration management for gridsql.

Configuration is built on Pydantic Settings and organized into
domain-specific files:

    - base.py: GridBaseSettings, common model config
    - transport.py: HTTP timeout, default API path prefix, TLS verification
    - query.py: default schema, page sizes, export chunk size
    - main.py: _Settings aggregator, get_settings() singleton accessor

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Environment Variable Naming:
    - GRIDSQL_TRANSPORT_TIMEOUT_SECONDS=10
    - GRIDSQL_QUERY_MAX_PAGE_SIZE=2000
    - GRIDSQL_LOG_LEVEL=DEBUG

Quick Start:
    >>> from gridsql.settings import get_settings
    >>> settings = get_settings()
    >>> settings.transport.timeout_seconds
    30.0
"""

from .main import _Settings, get_settings, _reload_settings
from .base import GridBaseSettings
from .query import QuerySettings
from .transport import TransportSettings

__all__ = [
    "get_settings",
    "GridBaseSettings",
    "QuerySettings",
    "TransportSettings",
]
