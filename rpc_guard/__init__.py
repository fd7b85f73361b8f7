"""
RPC Guard
=========
API key gate for JSON-RPC endpoints of a UserOperation bundler.
"""

__version__ = "0.1.0"

# Configuration
from rpc_guard.config import (
    ApiKeyAuthConfig,
    ServiceSettings,
    DEFAULT_PROTECTED_METHODS,
    parse_protected_methods,
)

# Errors
from rpc_guard.errors import (
    RpcError,
    UnauthorizedAccess,
    UNAUTHORIZED_CODE,
    UNAUTHORIZED_MESSAGE,
    jsonrpc_error_envelope,
)

# Decision logic
from rpc_guard.routes import is_rpc_path, is_rpc_url, rpc_path_from_url
from rpc_guard.methods import (
    Call,
    SingleCall,
    BatchCall,
    MalformedBody,
    RequestBody,
    parse_request_body,
    extract_methods,
    decode_json_body,
)
from rpc_guard.policy import requires_auth
from rpc_guard.credentials import (
    API_KEY_HEADER,
    API_KEY_QUERY_PARAM,
    key_from_headers,
    key_from_handshake,
)
from rpc_guard.validator import AuthDecision, ApiKeyValidator, validate_api_key

# Transport adapters
from rpc_guard.middleware import (
    ApiKeyAuthMiddleware,
    WebSocketApiKeyAuthMiddleware,
    install_api_key_auth,
)

# Logging
from rpc_guard.observability import setup_logging

__all__ = [
    # Config
    "ApiKeyAuthConfig",
    "ServiceSettings",
    "DEFAULT_PROTECTED_METHODS",
    "parse_protected_methods",
    # Errors
    "RpcError",
    "UnauthorizedAccess",
    "UNAUTHORIZED_CODE",
    "UNAUTHORIZED_MESSAGE",
    "jsonrpc_error_envelope",
    # Routes
    "is_rpc_path",
    "is_rpc_url",
    "rpc_path_from_url",
    # Methods
    "Call",
    "SingleCall",
    "BatchCall",
    "MalformedBody",
    "RequestBody",
    "parse_request_body",
    "extract_methods",
    "decode_json_body",
    # Policy
    "requires_auth",
    # Credentials
    "API_KEY_HEADER",
    "API_KEY_QUERY_PARAM",
    "key_from_headers",
    "key_from_handshake",
    # Validator
    "AuthDecision",
    "ApiKeyValidator",
    "validate_api_key",
    # Middleware
    "ApiKeyAuthMiddleware",
    "WebSocketApiKeyAuthMiddleware",
    "install_api_key_auth",
    # Logging
    "setup_logging",
]
