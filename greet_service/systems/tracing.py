# greet_service/systems/tracing.py
import logging
from typing import Optional

from flask import Flask, current_app, g, request
from opentelemetry import propagate, trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.zipkin.json import ZipkinExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

logger = logging.getLogger(__name__)


def create_span_exporter(host: str, port: int, protocol: str = "zipkin") -> SpanExporter:
    """
    Builds the exporter for the collector at ``host:port``.

    Raises:
        ValueError for a protocol other than "zipkin" or "otlp".
    """
    if protocol == "zipkin":
        return ZipkinExporter(endpoint=f"http://{host}:{port}/api/v2/spans")
    if protocol == "otlp":
        return OTLPSpanExporter(endpoint=f"http://{host}:{port}/v1/traces")
    raise ValueError(f"Unsupported TRACING_PROTOCOL '{protocol}'; expected 'zipkin' or 'otlp'")


def create_tracer_provider(config) -> Optional[TracerProvider]:
    """Builds an exporting tracer provider, or None when no collector is configured."""
    host = config.get("TRACING_HOST")
    port = config.get("TRACING_PORT")
    if not (host and port):
        logger.info("TRACING_HOST/TRACING_PORT not defined. Sending no trace data.")
        return None

    protocol = config.get("TRACING_PROTOCOL", "zipkin")
    exporter = create_span_exporter(host, port, protocol)
    logger.info(f"Sending {protocol} trace data to {host}:{port}")
    provider = TracerProvider(
        resource=Resource.create({"service.name": config.get("TRACING_SERVICE_NAME", "greet-service")})
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


class RequestTracing:
    """
    Opens a server span for every request and ends it on teardown.

    Handlers that do extra work can hang child spans off the request span
    with start_child_span().
    """

    def __init__(self):
        self.tracer: Optional[trace.Tracer] = None

    def init_app(self, app: Flask, tracer_provider: Optional[TracerProvider] = None):
        provider = tracer_provider or create_tracer_provider(app.config)
        self.tracer = provider.get_tracer(__name__) if provider else trace.NoOpTracer()
        app.extensions["request_tracing"] = self
        app.before_request(self._start_request_span)
        app.after_request(self._tag_response)
        app.teardown_request(self._end_request_span)

    def _start_request_span(self):
        rule = request.url_rule.rule if request.url_rule else request.path
        g.request_span = self.tracer.start_span(
            f"{request.method} {rule}",
            context=propagate.extract(request.headers),
            kind=SpanKind.SERVER,
        )

    def _tag_response(self, response):
        span = g.get("request_span")
        if span is not None:
            span.set_attribute("http.status_code", response.status_code)
        return response

    def _end_request_span(self, exc):
        span = g.pop("request_span", None)
        if span is None:
            return
        if exc is not None:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
        span.end()

    def start_child_span(self, name: str) -> Span:
        parent = g.get("request_span")
        context = trace.set_span_in_context(parent) if parent is not None else None
        return self.tracer.start_span(name, context=context)


def get_request_tracing() -> RequestTracing:
    return current_app.extensions["request_tracing"]
