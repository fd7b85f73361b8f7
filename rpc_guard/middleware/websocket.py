"""
API Key Gate Middleware for WebSocket JSON-RPC Endpoints
========================================================

The key is captured once at handshake (``x-api-key`` header, else the
``apiKey`` query parameter) and reused for every message on the connection.
Each inbound message is checked before the application sees it. A denied
message is answered with a JSON-RPC error on the same socket and dropped;
the connection stays open.

Usage:
    from rpc_guard.middleware.websocket import WebSocketApiKeyAuthMiddleware

    app.add_middleware(WebSocketApiKeyAuthMiddleware, config=config)
"""

import json
from typing import Optional

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..config import ApiKeyAuthConfig
from ..credentials import key_from_handshake
from ..errors import jsonrpc_error_envelope
from ..methods import decode_json_body, extract_methods
from ..observability import record_decision
from ..routes import is_rpc_path
from ..validator import ApiKeyValidator, AuthDecision

logger = structlog.get_logger(__name__)


class WebSocketApiKeyAuthMiddleware:
    """ASGI adapter for the API key gate on WebSocket connections."""

    def __init__(self, app: ASGIApp, config: ApiKeyAuthConfig) -> None:
        self.app = app
        self.validator = ApiKeyValidator(config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # HTTP is handled by ApiKeyAuthMiddleware, lifespan needs nothing
        if scope["type"] != "websocket":
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        if not self.validator.enabled or not is_rpc_path(path):
            await self.app(scope, receive, send)
            return

        # Private to this connection, never re-read per message
        provided_key = key_from_handshake(scope)

        async def guarded_receive() -> Message:
            while True:
                message = await receive()
                if message["type"] != "websocket.receive":
                    return message

                decision = self._check(message, provided_key, path)
                if decision.allowed:
                    return message

                await send({
                    "type": "websocket.send",
                    "text": json.dumps(jsonrpc_error_envelope(decision.error)),
                })

        await self.app(scope, guarded_receive, send)

    def _check(self, message: Message, provided_key: Optional[str], path: str) -> AuthDecision:
        payload = message.get("text")
        if payload is None:
            payload = message.get("bytes")

        methods = extract_methods(decode_json_body(payload))
        decision = self.validator.check(methods, provided_key)
        record_decision("websocket", decision.allowed)

        if not decision.allowed:
            logger.warning(
                "api_key_auth_denied",
                transport="websocket",
                path=path,
                methods=list(methods),
            )
        return decision
