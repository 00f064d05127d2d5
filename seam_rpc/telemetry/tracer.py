"""
OpenTelemetry Trace Context Management

Provides trace context injection, extraction and propagation so a call can be
traced across whatever transport carries the JSON-RPC envelopes.

A trace context is a plain dictionary:
    {"trace_id": <32 hex>, "span_id": <16 hex>, "sampled": bool, "baggage": {...}}
"""

import logging
import contextvars
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.context import attach, detach
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

logger = logging.getLogger(__name__)

TRACE_CONTEXT_FIELD = "trace_context"

# Context variable for current trace context
current_trace_context = contextvars.ContextVar('current_trace_context', default=None)


def setup_tracer(service_name: str,
                 otlp_endpoint: str = "localhost:4317",
                 exporter: Optional[SpanExporter] = None):
    """Configure the global OpenTelemetry tracer provider

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address, used when no exporter is given
        exporter: Span exporter to use instead of OTLP

    Returns:
        Tracer for the service
    """
    provider = TracerProvider(sampler=ALWAYS_ON)

    if exporter is None:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    tracer = trace.get_tracer(service_name)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}")

    return tracer


def _is_hex(value: Any, length: int) -> bool:
    if not isinstance(value, str) or len(value) != length:
        return False
    try:
        return int(value, 16) != 0
    except ValueError:
        return False


def get_current_trace_context() -> Optional[Dict[str, Any]]:
    """Get the trace context of the active span, or the last propagated one

    Returns:
        Dict: Trace context, None when nothing is being traced
    """
    span_context = trace.get_current_span().get_span_context()

    if not span_context.is_valid:
        return current_trace_context.get()

    return {
        'trace_id': format(span_context.trace_id, '032x'),
        'span_id': format(span_context.span_id, '016x'),
        'sampled': span_context.trace_flags.sampled,
        'baggage': {},
    }


def inject_trace_context() -> Optional[Dict[str, Any]]:
    """Inject the current trace context into a transportable dictionary

    Returns:
        Dict[str, Any]: Copy of the current trace context, None if there is none
    """
    trace_context = get_current_trace_context()
    if trace_context is None:
        return None
    return {**trace_context, 'baggage': dict(trace_context.get('baggage') or {})}


def extract_trace_context(trace_context_dict: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Extract a trace context from an inbound dictionary

    Malformed contexts are ignored rather than rejected; tracing never
    fails a request.

    Args:
        trace_context_dict: Dictionary containing trace_id, span_id etc.

    Returns:
        Dict: Normalized trace context, None if missing or malformed
    """
    if not isinstance(trace_context_dict, dict):
        return None

    trace_id = trace_context_dict.get('trace_id')
    span_id = trace_context_dict.get('span_id')
    if not (_is_hex(trace_id, 32) and _is_hex(span_id, 16)):
        logger.debug(f"Ignoring malformed trace context: {trace_context_dict!r}")
        return None

    baggage = trace_context_dict.get('baggage')
    return {
        'trace_id': trace_id.lower(),
        'span_id': span_id.lower(),
        'sampled': bool(trace_context_dict.get('sampled', True)),
        'baggage': {str(k): str(v) for k, v in baggage.items()} if isinstance(baggage, dict) else {},
    }


@contextmanager
def with_trace_context(trace_context: Optional[Dict[str, Any]]) -> Iterator[None]:
    """Use specified trace context as the remote parent of the current context

    Args:
        trace_context: Trace context from extract_trace_context

    Yields:
        None, used as context manager
    """
    if not trace_context:
        yield
        return

    span_context = trace.SpanContext(
        trace_id=int(trace_context['trace_id'], 16),
        span_id=int(trace_context['span_id'], 16),
        is_remote=True,
        trace_flags=trace.TraceFlags(trace.TraceFlags.SAMPLED if trace_context['sampled'] else trace.TraceFlags.DEFAULT),
    )
    otel_context = trace.set_span_in_context(trace.NonRecordingSpan(span_context))

    var_token = current_trace_context.set(trace_context)
    token = attach(otel_context)
    try:
        yield
    finally:
        detach(token)
        current_trace_context.reset(var_token)


def create_span(name: str, attributes: Dict[str, Any] = None, kind=trace.SpanKind.INTERNAL):
    """Create new span

    Args:
        name: Span name
        attributes: Span attributes
        kind: Span kind

    Returns:
        Context manager yielding the span
    """
    tracer = trace.get_tracer(__name__)
    return tracer.start_as_current_span(name, attributes=attributes or {}, kind=kind)


def trace_context_middleware(request: Dict[str, Any]) -> Dict[str, Any]:
    """Client middleware that attaches the current trace context to a request"""
    trace_context = inject_trace_context()
    if trace_context is not None:
        request[TRACE_CONTEXT_FIELD] = trace_context
    return request
