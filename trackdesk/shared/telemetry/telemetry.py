"""OpenTelemetry setup for the sync service.

Spans come from three places: incoming API requests (FastAPI), outbound
store calls (httpx, including the long-lived partition streams) and the
`traced` decorator on store and service operations. Exporters: console,
otlp or none.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from trackdesk.core.config import Settings

logger = logging.getLogger(__name__)

# Polled constantly by orchestrators; not worth a span each.
_EXCLUDED_URLS = "/api/v1/health,/api/v1/health/ready"


def build_exporter(kind: str, otlp_endpoint: str | None = None) -> SpanExporter | None:
    """Return the span exporter for kind ("console", "otlp" or "none")."""
    if kind == "none":
        return None
    if kind == "otlp":
        if not otlp_endpoint:
            raise ValueError("TELEMETRY_OTLP_ENDPOINT is required for the otlp exporter")
        return OTLPSpanExporter(
            endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
        )
    if kind != "console":
        logger.warning("Unknown telemetry exporter %r; falling back to console", kind)
    return ConsoleSpanExporter()


class Telemetry:
    """Tracer provider plus the instrumentation installed on the app."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
        sample_rate: float = 1.0,
    ) -> None:
        self.resource = Resource(
            attributes={
                SERVICE_NAME: service_name,
                SERVICE_VERSION: service_version,
                "deployment.environment": environment,
            }
        )
        self.sample_rate = sample_rate
        self.provider: TracerProvider | None = None
        self._httpx_instrumentor: HTTPXClientInstrumentor | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Telemetry":
        return cls(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.telemetry_environment,
            sample_rate=settings.telemetry_sample_rate,
        )

    def start(self, app: FastAPI, exporter: SpanExporter | None) -> None:
        """Install the global tracer provider and instrument FastAPI and httpx."""
        self.provider = TracerProvider(
            resource=self.resource,
            sampler=ParentBased(TraceIdRatioBased(self.sample_rate)),
        )
        if exporter is not None:
            self.provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(self.provider)

        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=self.provider, excluded_urls=_EXCLUDED_URLS
        )
        self._httpx_instrumentor = HTTPXClientInstrumentor()
        self._httpx_instrumentor.instrument(tracer_provider=self.provider)
        logger.info(
            "Tracing enabled (exporter=%s, sample_rate=%s)",
            type(exporter).__name__ if exporter else "none",
            self.sample_rate,
        )

    def stop(self) -> None:
        """Remove httpx instrumentation and flush pending spans."""
        if self._httpx_instrumentor is not None:
            self._httpx_instrumentor.uninstrument()
            self._httpx_instrumentor = None
        if self.provider is not None:
            self.provider.shutdown()
            self.provider = None
            logger.info("Tracing stopped")


_telemetry: Telemetry | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> Telemetry | None:
    """Return the running telemetry instance, if tracing was started."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: Telemetry | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
