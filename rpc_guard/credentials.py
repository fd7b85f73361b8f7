"""
Credential Extraction
=====================
Reads the caller-supplied API key.

- HTTP: ``x-api-key`` header, on every request
- WebSocket: ``x-api-key`` header at handshake, else the ``apiKey`` query
  parameter of the connection URL. Read once per connection.
"""

from typing import Mapping, Optional

from starlette.datastructures import Headers, QueryParams
from starlette.types import Scope

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY_PARAM = "apiKey"


def key_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    """Return the ``x-api-key`` header value, matched case-insensitively."""
    if isinstance(headers, Headers):
        return headers.get(API_KEY_HEADER)
    for name, value in headers.items():
        if name.lower() == API_KEY_HEADER:
            return value
    return None


def key_from_handshake(scope: Scope) -> Optional[str]:
    """
    Capture the key for a WebSocket connection from its handshake scope.

    The header wins when present; the query parameter is only a fallback.
    """
    provided = key_from_headers(Headers(scope=scope))
    if provided is not None:
        return provided
    query = QueryParams(scope.get("query_string", b""))
    return query.get(API_KEY_QUERY_PARAM)
