"""
OpenTelemetry Integration Module

Provides distributed tracing and metrics collection capabilities:
- tracer: Trace context management (injection, extraction, propagation)
- metrics: Metrics collection

Trace contexts travel inside the request envelope, so tracing works the same
over any transport that embeds the RPC engine.
"""

from .tracer import (
    setup_tracer,
    inject_trace_context,
    extract_trace_context,
    get_current_trace_context,
    with_trace_context,
    create_span,
    trace_context_middleware,
)
from .metrics import (
    setup_metrics,
    increment_counter,
    record_latency,
)

__all__ = [
    "setup_tracer",
    "inject_trace_context",
    "extract_trace_context",
    "get_current_trace_context",
    "with_trace_context",
    "create_span",
    "trace_context_middleware",
    "setup_metrics",
    "increment_counter",
    "record_latency",
]
