"""
JSON-RPC Application Factory
============================
FastAPI host for a JSON-RPC dispatcher with the API key gate installed.

RPC routes (HTTP POST and WebSocket): ``/``, ``/rpc``, ``/v<N>/rpc``.
Exempt routes: ``/health``, ``/health/live``, ``/health/ready``, ``/metrics``.

Usage:
    from rpc_guard.app import create_app

    app = create_app(ApiKeyAuthConfig.from_env(), dispatcher=rpc_handler.handle)

    # or, with logging and service name taken from the environment
    app = create_app_from_env(dispatcher=rpc_handler.handle)
"""

import time
from typing import Any, Awaitable, Callable

import structlog
from fastapi import APIRouter, FastAPI, HTTPException, Request, WebSocket
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.websockets import WebSocketDisconnect

from .config import ApiKeyAuthConfig, ServiceSettings
from .methods import decode_json_body
from .middleware import install_api_key_auth
from .observability import METRICS_CONTENT_TYPE, export_metrics, setup_logging
from .routes import is_rpc_path

logger = structlog.get_logger(__name__)

# Receives the parsed JSON body (None if undecodable), returns the response
# payload or None when there is nothing to send back (notifications).
RpcDispatcher = Callable[[Any], Awaitable[Any]]

RPC_ROUTE_PATHS = ("/", "/rpc", "/v{version}/rpc")


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    api_key_auth: bool
    timestamp: float


def create_health_router(service_name: str, version: str, config: ApiKeyAuthConfig) -> APIRouter:
    """Health and metrics routes. None of them is gated."""
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service=service_name,
            version=version,
            api_key_auth=config.enabled,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        return {"status": "ready"}

    @router.get("/metrics")
    async def metrics():
        return Response(content=export_metrics(), media_type=METRICS_CONTENT_TYPE)

    return router


def create_app(
    config: ApiKeyAuthConfig,
    dispatcher: RpcDispatcher,
    service_name: str = "bundler-rpc",
    version: str = "0.1.0",
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: API key gate configuration, fixed for the app's lifetime
        dispatcher: Executes JSON-RPC bodies the gate lets through
        service_name: Reported by /health
        version: Reported by /health

    Returns:
        FastAPI app with RPC routes, health routes and both gate adapters
    """
    application = FastAPI(title=service_name, version=version)

    async def rpc_http(request: Request) -> Response:
        if not is_rpc_path(request.url.path):
            raise HTTPException(status_code=404, detail="Not Found")

        body = decode_json_body(await request.body())
        result = await dispatcher(body)
        if result is None:
            return Response(status_code=204)
        return JSONResponse(content=result)

    async def rpc_websocket(websocket: WebSocket) -> None:
        if not is_rpc_path(websocket.url.path):
            await websocket.close(code=1008)
            return

        await websocket.accept()
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                payload = message.get("text")
                if payload is None:
                    payload = message.get("bytes")

                result = await dispatcher(decode_json_body(payload))
                if result is not None:
                    await websocket.send_json(result)
            logger.debug("rpc_websocket_closed", path=websocket.url.path)
        except WebSocketDisconnect as e:
            logger.debug("rpc_websocket_disconnected", path=websocket.url.path, code=e.code)

    for path in RPC_ROUTE_PATHS:
        application.add_api_route(path, rpc_http, methods=["POST"])
        application.add_api_websocket_route(path, rpc_websocket)

    application.include_router(create_health_router(service_name, version, config))
    install_api_key_auth(application, config)

    logger.info(
        "rpc_app_created",
        service=service_name,
        api_key_auth=config.enabled,
    )
    return application


def create_app_from_env(dispatcher: RpcDispatcher, version: str = "0.1.0") -> FastAPI:
    """
    Configure logging and build the app from environment variables.

    Reads BUNDLER_API_KEY / API_KEY, PROTECTED_METHODS, SERVICE_NAME,
    LOG_LEVEL and LOG_JSON.
    """
    settings = ServiceSettings.from_env()
    setup_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_output=settings.log_json,
    )
    return create_app(
        ApiKeyAuthConfig.from_env(),
        dispatcher,
        service_name=settings.service_name,
        version=version,
    )


__all__ = [
    "RpcDispatcher",
    "HealthResponse",
    "create_app",
    "create_app_from_env",
    "create_health_router",
]
