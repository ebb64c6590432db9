"""URL construction for the Atelier REST API."""

from urllib.parse import quote

from gridsql.types import ServerSpec


def normalize_path_prefix(prefix: str) -> str:
    prefix = prefix.strip() or "/"
    if not prefix.startswith("/"):
        prefix = "/" + prefix
    if not prefix.endswith("/"):
        prefix = prefix + "/"
    return prefix


def build_base_url(server: ServerSpec, default_path_prefix: str = "/api/atelier/") -> str:
    """Root of the API, e.g. ``http://localhost:52773/api/atelier/``.

    A GET on this URL returns the server descriptor.
    """
    prefix = normalize_path_prefix(server.path_prefix or default_path_prefix)
    return f"{server.scheme}://{server.host}:{server.port}{prefix}"


def build_query_url(base_url: str, namespace: str) -> str:
    """Query endpoint for a namespace.

    The namespace is percent-encoded as a single path segment, so ``%SYS``
    becomes ``%25SYS``.
    """
    if not base_url.endswith("/"):
        base_url = base_url + "/"
    return f"{base_url}v1/{quote(namespace, safe='')}/action/query"
