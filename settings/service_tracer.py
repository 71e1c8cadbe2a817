import logging
from typing import Any, Dict, Optional
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.trace import Span

logger = logging.getLogger(__name__)

# Exclude both /health and /api/health
EXCLUDED_HEALTH_REGEX = r"^(?:/api)?/health(?:$|/.*)"

# Identity headers are recorded on spans; everything else is left out
CAPTURED_REQUEST_HEADERS = ["x-actor-id", "x-actor-role", "x-request-id"]


def initialize_tracer(service_name: str, fastapi_app, otlp_endpoint: Optional[str] = None):
    tracer_provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name})
    )

    # Falls back to OTEL_EXPORTER_OTLP_* env vars when no endpoint is given
    exporter = OTLPSpanExporter(endpoint=otlp_endpoint) if otlp_endpoint else OTLPSpanExporter()
    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)

    def server_request_hook(span: Span, scope: Dict[str, Any]) -> None:
        if span and span.is_recording():
            query_string = scope.get("query_string")
            if query_string:
                if isinstance(query_string, (bytes, bytearray)):
                    qs_value = query_string[:2048].decode("utf-8", errors="replace")
                else:
                    qs_value = str(query_string)[:2048]
                span.set_attribute("http.request.query_string", qs_value)

    FastAPIInstrumentor().instrument_app(
        fastapi_app,
        tracer_provider=tracer_provider,
        server_request_hook=server_request_hook,
        http_capture_headers_server_request=CAPTURED_REQUEST_HEADERS,
        excluded_urls=EXCLUDED_HEALTH_REGEX,
    )

    logger.info(f"Tracer Initialized for - {service_name}: {otlp_endpoint or 'env-configured endpoint'}")
    return tracer_provider
