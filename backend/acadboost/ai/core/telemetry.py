"""
AcadBoost - Telemetry Module
OpenTelemetry-based tracing for seeding and text generation
"""
import logging
import os
from typing import Optional
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.trace import Status, StatusCode

from acadboost.core.config import settings

logger = logging.getLogger(__name__)

# Service name from environment or default
SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "acadboost-backend")
OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")

# Global tracer instance
_tracer: Optional[trace.Tracer] = None


def init_telemetry() -> trace.Tracer:
    """
    Initialize OpenTelemetry with the exporter named by TELEMETRY_EXPORTER.
    Call this once at application startup.
    """
    global _tracer

    if _tracer is not None:
        return _tracer

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": settings.ENVIRONMENT,
    })

    provider = TracerProvider(resource=resource)

    if settings.TELEMETRY_EXPORTER == "otlp":
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

            otlp_exporter = OTLPSpanExporter(
                endpoint=OTLP_ENDPOINT,
                insecure=True,  # Use insecure for local development
            )
            provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        except Exception as e:
            logger.warning("Failed to set up OTLP exporter, using console: %s", e)
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    elif settings.TELEMETRY_EXPORTER == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer("acadboost", settings.APP_VERSION)

    logger.info(
        "Telemetry initialized: service=%s exporter=%s",
        SERVICE_NAME,
        settings.TELEMETRY_EXPORTER,
    )
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance, initializing if necessary."""
    global _tracer
    if _tracer is None:
        return init_telemetry()
    return _tracer


@contextmanager
def service_span(
    name: str,
    component: str,
    attributes: Optional[dict] = None
):
    """
    Context manager for spans around a unit of service work.

    Usage:
        with service_span("enrich_subject", "EnrichmentService") as span:
            span.set_attribute("subject", "os")
            result = await do_work()
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("component.name", component)
        span.set_attribute("component.operation", name)

        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, str(value) if value is not None else "")

        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def trace_llm_call(
    model: str,
    prompt_tokens: int = 0,
    completion_tokens: int = 0,
    total_tokens: int = 0,
):
    """
    Record LLM-specific telemetry attributes on the current span.
    Call this within an active span to add token usage metrics.
    """
    span = trace.get_current_span()
    if span:
        span.set_attribute("llm.model", model)
        span.set_attribute("llm.tokens.prompt", prompt_tokens)
        span.set_attribute("llm.tokens.completion", completion_tokens)
        span.set_attribute("llm.tokens.total", total_tokens)
