from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from app.config import get_settings
from app.main import create_app
from app.observability.tracing import TracingRuntime, init_tracing


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("OTEL_SERVICE_NAME", "hello-test")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector.test:4317")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "service.version=1.0,deployment.environment=test")
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def runtime(span_exporter: InMemorySpanExporter) -> Iterator[TracingRuntime]:
    runtime = init_tracing(get_settings(), exporter=span_exporter)
    yield runtime
    runtime.shutdown()


@pytest.fixture
async def api_client(runtime: TracingRuntime) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=create_app(get_settings(), runtime))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def untraced_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=create_app(get_settings()))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
