"""
RPC Gate Errors
===============
The single error kind raised by the API key gate and its JSON-RPC rendering.

The same error is returned for a missing key and a wrong key.
"""

from dataclasses import dataclass
from typing import Any, Dict

JSONRPC_VERSION = "2.0"

UNAUTHORIZED_CODE = -32001
UNAUTHORIZED_MESSAGE = "Unauthorized: Invalid or missing API key"

UNAUTHORIZED_HTTP_STATUS = 401


@dataclass(frozen=True)
class RpcError:
    """JSON-RPC error object."""
    code: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


UNAUTHORIZED_ERROR = RpcError(code=UNAUTHORIZED_CODE, message=UNAUTHORIZED_MESSAGE)


def jsonrpc_error_envelope(error: RpcError) -> Dict[str, Any]:
    """Wrap an error in a top-level JSON-RPC response with a null id."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": None,
        "error": error.to_dict(),
    }


class UnauthorizedAccess(Exception):
    """A protected method was requested without a matching API key."""

    code = UNAUTHORIZED_CODE
    message = UNAUTHORIZED_MESSAGE

    def __init__(self):
        super().__init__(self.message)

    def to_error(self) -> RpcError:
        return UNAUTHORIZED_ERROR

    def to_envelope(self) -> Dict[str, Any]:
        return jsonrpc_error_envelope(self.to_error())
