"""
API Key Gate Middleware for HTTP JSON-RPC Endpoints
===================================================

Rejects JSON-RPC calls to protected methods unless the caller presents the
shared API key in the ``x-api-key`` header. Unprotected methods and non-RPC
routes (health, metrics, ...) pass straight through.

Usage:
    from rpc_guard.middleware.http import ApiKeyAuthMiddleware

    app.add_middleware(ApiKeyAuthMiddleware, config=ApiKeyAuthConfig.from_env())
"""

from typing import Callable, Awaitable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..config import ApiKeyAuthConfig
from ..credentials import key_from_headers
from ..errors import UNAUTHORIZED_HTTP_STATUS, jsonrpc_error_envelope
from ..methods import decode_json_body, extract_methods
from ..observability import record_decision
from ..routes import is_rpc_path
from ..validator import ApiKeyValidator

logger = structlog.get_logger(__name__)


class ApiKeyAuthMiddleware(BaseHTTPMiddleware):
    """
    HTTP adapter for the API key gate.

    Runs ahead of the JSON-RPC handler. A denied request, batch or single,
    gets exactly one 401 error envelope and never reaches the handler.
    """

    def __init__(self, app, config: ApiKeyAuthConfig):
        super().__init__(app)
        self.validator = ApiKeyValidator(config)

        if config.enabled:
            logger.info(
                "api_key_auth_enabled",
                transport="http",
                protected_methods=list(config.protected_methods),
            )
        else:
            logger.info("api_key_auth_disabled", transport="http")

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self.validator.enabled:
            return await call_next(request)

        path = request.url.path
        if not is_rpc_path(path):
            return await call_next(request)

        # Body is cached on the request and replayed to the handler
        body = decode_json_body(await request.body())
        methods = extract_methods(body)
        decision = self.validator.check(methods, key_from_headers(request.headers))
        record_decision("http", decision.allowed)

        if not decision.allowed:
            logger.warning(
                "api_key_auth_denied",
                transport="http",
                path=path,
                methods=list(methods),
                client_ip=request.client.host if request.client else "unknown",
            )
            return JSONResponse(
                status_code=UNAUTHORIZED_HTTP_STATUS,
                content=jsonrpc_error_envelope(decision.error),
            )

        logger.debug("api_key_auth_passed", transport="http", path=path)
        return await call_next(request)
