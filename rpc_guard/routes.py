"""
RPC Route Matcher
=================
Classifies an inbound path as gated (JSON-RPC endpoint) or exempt.
"""

import re
from typing import FrozenSet
from urllib.parse import urlsplit

RPC_PATHS: FrozenSet[str] = frozenset({"/", "/rpc", "/v1/rpc", "/v2/rpc"})

VERSIONED_RPC_PATH = re.compile(r"/v[0-9]+/rpc")


def is_rpc_path(path: str) -> bool:
    """
    Check whether a path (query already stripped) is a JSON-RPC endpoint.

    Everything else, health checks and metrics included, is exempt.
    """
    return path in RPC_PATHS or VERSIONED_RPC_PATH.fullmatch(path) is not None


def rpc_path_from_url(raw_url: str) -> str:
    """Extract the path component of a raw URL or request target."""
    return urlsplit(raw_url).path or "/"


def is_rpc_url(raw_url: str) -> bool:
    """Match a raw URL after parsing its query string out."""
    return is_rpc_path(rpc_path_from_url(raw_url))
