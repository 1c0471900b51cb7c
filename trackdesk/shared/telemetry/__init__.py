"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from trackdesk.shared.telemetry.logging import get_logger, setup_logging
from trackdesk.shared.telemetry.telemetry import (
    Telemetry,
    build_exporter,
    get_telemetry,
    set_telemetry,
)
from trackdesk.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "Telemetry",
    "build_exporter",
    "get_telemetry",
    "set_telemetry",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
