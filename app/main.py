from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI
from opentelemetry.sdk.trace.export import SpanExporter

from app.api.hello import router as hello_router
from app.config import Settings, get_settings
from app.observability.logging import configure_logging
from app.observability.middleware import RequestContextMiddleware
from app.observability.tracing import TracingRuntime, instrument_app, tracing_runtime


def create_app(settings: Settings, runtime: TracingRuntime | None = None) -> FastAPI:
    app = FastAPI(title=settings.otel_service_name, version="0.1.0")
    app.state.settings = settings
    app.state.tracing = runtime
    app.include_router(hello_router)
    app.add_middleware(RequestContextMiddleware)

    # Without a runtime requests are served untraced.
    if runtime is not None:
        instrument_app(app, runtime)
    return app


def serve(app: FastAPI, settings: Settings) -> bool:
    """Run uvicorn until shutdown; False if the listener never came up.

    Bind errors are reported by uvicorn itself, either by returning without
    starting or by ``sys.exit`` depending on its version.
    """

    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None))
    try:
        server.run()
    except SystemExit:
        if server.started:
            raise
    return server.started


def run(settings: Settings | None = None, exporter: SpanExporter | None = None) -> None:
    settings = settings or get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("main")
    logger.info("starting", otlp_endpoint=settings.otel_exporter_otlp_endpoint)

    with tracing_runtime(settings, exporter=exporter) as runtime:
        if not serve(create_app(settings, runtime), settings):
            logger.error("failed to start server", host=settings.host, port=settings.port)
