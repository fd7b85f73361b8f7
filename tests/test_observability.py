import logging

import structlog

from rpc_guard.observability import GATE_REGISTRY, export_metrics, record_decision, setup_logging


def sample(transport, outcome):
    value = GATE_REGISTRY.get_sample_value(
        "rpc_api_key_auth_decisions_total", {"transport": transport, "outcome": outcome}
    )
    return value or 0.0


def test_record_decision_counts_by_outcome():
    allowed = sample("websocket", "allowed")
    denied = sample("websocket", "denied")

    record_decision("websocket", True)
    record_decision("websocket", False)
    record_decision("websocket", False)

    assert sample("websocket", "allowed") == allowed + 1
    assert sample("websocket", "denied") == denied + 2
    assert b"rpc_api_key_auth_decisions_total" in export_metrics()


def test_setup_logging_configures_root_level():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(service_name="bundler-test", level="warning", json_output=False)

        assert root.level == logging.WARNING
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
