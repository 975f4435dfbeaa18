"""
OpenTelemetry Tracing Setup
===========================
Tracing for pipeline execution.

Each PipelineExecutor.execute call opens a "procpipe.pipeline.execute" span.
Spans are exported over OTLP/HTTP when PROCPIPE_ENABLE_TRACING=true; otherwise
the global no-op tracer is used and span calls cost next to nothing.
"""

import atexit
from typing import Any, Mapping, Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from procpipe.config import TRACING

SERVICE_NAME_VALUE = TRACING.SERVICE_NAME
OTLP_ENDPOINT = TRACING.OTLP_ENDPOINT
ENABLE_TRACING = TRACING.ENABLED

# Longest string kept for a single attribute value
MAX_ATTRIBUTE_LENGTH = 256

_provider: Optional[TracerProvider] = None
_tracer = None


def _cleanup_tracing() -> None:
    """Flush pending spans at interpreter exit."""
    if _provider is not None:
        try:
            _provider.shutdown()
        except Exception:
            pass  # Exporter may already be gone at exit


def setup_tracing(service_name: str = SERVICE_NAME_VALUE) -> trace.Tracer:
    """
    Install a TracerProvider exporting to OTLP_ENDPOINT.

    Args:
        service_name: Service name attached to every span

    Returns:
        Tracer bound to the new provider
    """
    global _provider

    _provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    _provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=OTLP_ENDPOINT)))
    trace.set_tracer_provider(_provider)

    atexit.register(_cleanup_tracing)

    return trace.get_tracer(service_name)


def init_tracing() -> trace.Tracer:
    """Return the package tracer, exporting spans only when tracing is enabled."""
    global _tracer
    if _tracer is None:
        _tracer = setup_tracing() if ENABLE_TRACING else trace.get_tracer(SERVICE_NAME_VALUE)
    return _tracer


def record_span_attributes(span: Any, attributes: Mapping[str, Any]) -> None:
    """Copy pipeline attributes onto span.

    None values are skipped since OpenTelemetry cannot store them; strings,
    and the strings inside lists, are cut to MAX_ATTRIBUTE_LENGTH.
    """
    setter = getattr(span, "set_attribute", None)
    if not callable(setter):
        return

    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value[:MAX_ATTRIBUTE_LENGTH]
        elif isinstance(value, (list, tuple)):
            value = [str(item)[:MAX_ATTRIBUTE_LENGTH] for item in value]
        setter(key, value)
