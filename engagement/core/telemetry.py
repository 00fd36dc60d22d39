"""OpenTelemetry tracing for the engagement service."""

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from engagement.config import settings

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Probes and docs are not worth a trace
EXCLUDED_URLS = "health,api/docs,api/redoc,api/openapi.json"


def telemetry_enabled() -> bool:
    return bool(settings.OTEL_EXPORTER_OTLP_ENDPOINT)


def _build_tracer_provider() -> TracerProvider:
    resource = Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": "1.0.0",
            "deployment.environment": "development" if settings.DEBUG else "production",
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        )
    )
    return provider


def setup_telemetry(app: "FastAPI") -> bool:
    """Export request traces to the OTLP collector.

    Returns:
        True if tracing was enabled
    """
    if not telemetry_enabled():
        logger.info("Telemetry disabled: OTEL_EXPORTER_OTLP_ENDPOINT not configured")
        return False

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        provider = _build_tracer_provider()
        trace.set_tracer_provider(provider)
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS
        )
    except Exception as e:
        logger.warning(f"Failed to setup telemetry: {e}")
        return False

    logger.info(f"Telemetry enabled: exporting to {settings.OTEL_EXPORTER_OTLP_ENDPOINT}")
    return True


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer for service-level spans.

    Spans are no-ops until setup_telemetry installs a provider.
    """
    return trace.get_tracer(name)


def instrument_database(engine: "AsyncEngine") -> None:
    """Trace the queries issued through the service's engine."""
    try:
        from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, enable_commenter=True)
        logger.info("SQLAlchemy instrumentation enabled")
    except ImportError:
        logger.debug("SQLAlchemy instrumentation not available")


def instrument_httpx() -> None:
    """Trace calls made by EngagementClient."""
    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

        HTTPXClientInstrumentor().instrument()
        logger.info("httpx instrumentation enabled")
    except ImportError:
        logger.debug("httpx instrumentation not available")


def setup_all_instrumentation(app: "FastAPI", engine: "AsyncEngine") -> None:
    """Enable request, query and outbound HTTP tracing."""
    if not setup_telemetry(app):
        return

    instrument_database(engine)
    instrument_httpx()
