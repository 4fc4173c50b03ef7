"""OpenTelemetry tracing runtime.

The runtime is built from explicit :class:`~app.config.Settings` and handed to
the HTTP layer; nothing is installed as the process-global tracer provider.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from app.config import Settings


SHUTDOWN_FLUSH_TIMEOUT_MS = 30_000


class TracingShutdownError(RuntimeError):
    """Pending spans could not be flushed before shutdown."""


class TracingRuntime:
    def __init__(self, provider: TracerProvider, resource: Resource) -> None:
        self.provider = provider
        self.resource = resource
        self._shut_down = False

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def get_tracer(self, name: str) -> Any:
        return self.provider.get_tracer(name)

    def shutdown(self, timeout_millis: int = SHUTDOWN_FLUSH_TIMEOUT_MS) -> None:
        """Flush pending spans and stop the provider (idempotent)."""

        if self._shut_down:
            return
        self._shut_down = True

        flushed = self.provider.force_flush(timeout_millis=timeout_millis)
        self.provider.shutdown()
        if not flushed:
            raise TracingShutdownError(f"Span flush did not complete within {timeout_millis} ms")
        structlog.get_logger("tracing").info("tracing shut down")


def build_resource(settings: Settings) -> Resource:
    return Resource.create({**settings.resource_attributes, SERVICE_NAME: settings.otel_service_name})


def build_exporter(settings: Settings) -> SpanExporter:
    return OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint,
        insecure=settings.otel_exporter_otlp_insecure,
    )


def init_tracing(settings: Settings, exporter: SpanExporter | None = None) -> TracingRuntime:
    """Create a tracer provider exporting through ``exporter`` (OTLP by default)."""

    resource = build_resource(settings)
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter or build_exporter(settings)))

    structlog.get_logger("tracing").info(
        "tracing initialized",
        endpoint=settings.otel_exporter_otlp_endpoint,
        service_name=settings.otel_service_name,
    )
    return TracingRuntime(provider=provider, resource=resource)


@contextmanager
def tracing_runtime(settings: Settings, exporter: SpanExporter | None = None) -> Iterator[TracingRuntime]:
    runtime = init_tracing(settings, exporter=exporter)
    try:
        yield runtime
    finally:
        runtime.shutdown()


def instrument_app(app: Any, runtime: TracingRuntime) -> None:
    """Wrap every request of ``app`` in a server span from ``runtime``."""

    FastAPIInstrumentor.instrument_app(app, tracer_provider=runtime.provider)
