"""
RPC Gate Middleware Package

Transport adapters for the API key gate.
"""

from starlette.applications import Starlette

from ..config import ApiKeyAuthConfig
from .http import ApiKeyAuthMiddleware
from .websocket import WebSocketApiKeyAuthMiddleware


def install_api_key_auth(app: Starlette, config: ApiKeyAuthConfig) -> None:
    """
    Add both transport adapters to a Starlette/FastAPI application.

    Usage:
        app = FastAPI()
        install_api_key_auth(app, ApiKeyAuthConfig.from_env())
    """
    app.add_middleware(ApiKeyAuthMiddleware, config=config)
    app.add_middleware(WebSocketApiKeyAuthMiddleware, config=config)


__all__ = [
    "ApiKeyAuthMiddleware",
    "WebSocketApiKeyAuthMiddleware",
    "install_api_key_auth",
]
