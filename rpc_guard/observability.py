"""
Logging and Metrics
===================
structlog configuration and the Prometheus decision counter.

Usage:
    from rpc_guard.observability import setup_logging

    setup_logging(service_name="bundler-rpc", level="INFO")
"""

import logging
import sys

import structlog
from prometheus_client import CollectorRegistry, Counter, generate_latest, CONTENT_TYPE_LATEST

# Separate from the host application's default registry
GATE_REGISTRY = CollectorRegistry()

AUTH_DECISIONS_TOTAL = Counter(
    name="rpc_api_key_auth_decisions_total",
    documentation="API key gate decisions on RPC endpoints",
    labelnames=["transport", "outcome"],
    registry=GATE_REGISTRY,
)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


def record_decision(transport: str, allowed: bool) -> None:
    AUTH_DECISIONS_TOTAL.labels(
        transport=transport,
        outcome="allowed" if allowed else "denied",
    ).inc()


def export_metrics() -> bytes:
    """Render the gate registry in Prometheus text format."""
    return generate_latest(GATE_REGISTRY)


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        service_name: Bound to every log line as ``service``
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, console rendering otherwise
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    structlog.get_logger(__name__).info("logging_configured", level=level.upper())
