"""OpenTelemetry tracing for the blog API.

``setup_tracing`` installs the tracer provider and ``instrument_app`` hooks
FastAPI and SQLAlchemy into it, so every request gets a server span with
the statements it ran as children. The services open their own spans for
multi-step writes with ``trace_operation``.

Finished spans go to one of three places, chosen by
``observability_config.exporter_type``:

- ``console``: DEBUG records through Loguru (development)
- ``otlp``: a collector over gRPC (production)
- ``none``: nowhere; spans are still created for context propagation
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from src.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from fastapi import FastAPI

    from src.core.config import Settings

DEFAULT_OTLP_ENDPOINT: Final[str] = "http://localhost:4317"
NANOSECONDS_PER_MILLISECOND: Final[int] = 1_000_000

# ASGI and driver spans nested under every request span
SKIPPED_SPAN_NAMES: Final[frozenset[str]] = frozenset(
    {"connect", "http send", "http receive", "cursor.execute"}
)

type SpanAttribute = str | int | float | bool


class LoguruSpanExporter(SpanExporter):
    """Writes each finished span as one DEBUG record."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Log the spans that are not in ``SKIPPED_SPAN_NAMES``."""
        for span in spans:
            span_context = span.get_span_context()
            if span_context is None or span.name in SKIPPED_SPAN_NAMES:
                continue

            attributes = dict(span.attributes or {})
            duration_ms = None
            if span.start_time and span.end_time:
                elapsed = span.end_time - span.start_time
                duration_ms = elapsed // NANOSECONDS_PER_MILLISECOND

            correlation_id = attributes.get(
                "correlation_id", RequestContext.get_correlation_id()
            )
            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                correlation_id=correlation_id,
                span_name=span.name,
                duration_ms=duration_ms,
                attributes=attributes,
                status=span.status.status_code.name,
            ).debug("Span {} finished", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Build the exporter named by ``observability_config.exporter_type``.

    Args:
        settings: Application settings.

    Returns:
        SpanExporter | None: The exporter, or None for ``none``.
    """
    config = settings.observability_config

    match config.exporter_type:
        case "console":
            logger.info("Spans will be logged through Loguru")
            return LoguruSpanExporter()
        case "otlp":
            endpoint = config.exporter_endpoint or DEFAULT_OTLP_ENDPOINT
            logger.info("Spans will be exported over OTLP to {}", endpoint)
            # Plain-text gRPC is only acceptable against a local collector
            return OTLPSpanExporter(
                endpoint=endpoint, insecure=settings.environment == "development"
            )
        case _:
            logger.info("Span export is off")
            return None


@lru_cache(maxsize=1)
def get_tracer(name: str) -> trace.Tracer:
    """Tracer for ``name``, created once."""
    return trace.get_tracer(name)


def _service_resource(settings: Settings) -> Resource:
    return Resource.create(
        {
            "service.name": settings.app_name,
            "service.version": settings.app_version,
            "deployment.environment": settings.environment,
        }
    )


def setup_tracing(settings: Settings) -> None:
    """Install the global tracer provider unless tracing is disabled.

    Args:
        settings: Application settings.
    """
    config = settings.observability_config
    if not config.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return

    tracer_provider = TracerProvider(
        resource=_service_resource(settings),
        sampler=TraceIdRatioBased(config.trace_sample_rate),
    )
    exporter = get_span_exporter(settings)
    if exporter is not None:
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=config.exporter_type,
        sample_rate=config.trace_sample_rate,
    )


def untraced_urls(settings: Settings) -> str:
    """Comma separated paths that get no server span.

    The health endpoint and whichever documentation routes are enabled.
    """
    paths = ["/health", settings.docs_url, settings.redoc_url, settings.openapi_url]
    return ",".join(path for path in paths if path)


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Instrument the application and every SQLAlchemy engine.

    SQLAlchemy instrumentation is global and only affects engines created
    afterwards, so this runs before the first request opens the engine.

    Args:
        app: FastAPI application to instrument.
        settings: Application settings.
    """
    if not settings.observability_config.enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=untraced_urls(settings),
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument()

    logger.info("Application instrumented for tracing")


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Server request hook tagging the span with the request ids.

    Args:
        span: The server span of the request.
        scope: ASGI scope of the request.
    """
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)

    headers = dict(scope.get("headers", []))
    if request_id := headers.get(b"x-request-id", b"").decode("utf-8"):
        span.set_attribute("request_id", request_id)


def add_span_attributes(**attributes: SpanAttribute) -> None:
    """Set attributes on the current span, if it is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        span.set_attribute(key, value)


@contextmanager
def trace_operation(name: str, **attributes: SpanAttribute) -> Generator[trace.Span]:
    """Run a block inside a child span carrying the correlation id.

    Args:
        name: Span name, ``<entity>.<operation>`` by convention.
        **attributes: Initial span attributes.

    Yields:
        trace.Span: The active span.

    Example:
        >>> with trace_operation("user.create", email_domain="example.com"):
        ...     user = await users.create(user)
    """
    with get_tracer(__name__).start_as_current_span(name) as span:
        span.set_attributes(attributes)
        if correlation_id := RequestContext.get_correlation_id():
            span.set_attribute("correlation_id", correlation_id)
        yield span
