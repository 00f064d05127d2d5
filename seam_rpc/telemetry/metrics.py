"""
OpenTelemetry Metrics Collection

Counters and latency histograms for the RPC server and client. Until
setup_metrics (or the embedder) installs a meter provider every instrument
is a no-op.
"""

import logging
from typing import Any, Dict, List, Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)

# Instruments by name, created on first use against the current meter provider
_instruments: Dict[str, Any] = {}


def setup_metrics(service_name: str,
                  otlp_endpoint: Optional[str] = "localhost:4317",
                  export_interval_ms: int = 5000,
                  console: bool = False,
                  readers: Optional[List[MetricReader]] = None):
    """Install a meter provider that exports the RPC counters and histograms

    Args:
        service_name: Name the returned meter is registered under
        otlp_endpoint: OTLP collector address, None to skip OTLP export
        export_interval_ms: Period of the OTLP and console readers
        console: Also print metrics to stdout
        readers: Extra readers, e.g. an InMemoryMetricReader in tests

    Returns:
        Meter for service_name
    """
    metric_readers = list(readers or [])

    if otlp_endpoint:
        metric_readers.append(PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=otlp_endpoint),
            export_interval_millis=export_interval_ms
        ))

    if console:
        metric_readers.append(PeriodicExportingMetricReader(
            ConsoleMetricExporter(),
            export_interval_millis=export_interval_ms
        ))

    provider = MeterProvider(metric_readers=metric_readers)
    metrics.set_meter_provider(provider)
    meter = metrics.get_meter(service_name)

    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return meter


def _instrument(kind: str, name: str, unit: str):
    instrument = _instruments.get(name)
    if instrument is None:
        meter = metrics.get_meter(__name__)
        if kind == "counter":
            instrument = meter.create_counter(name=name, description=f"RPC count of {name}", unit=unit)
        else:
            instrument = meter.create_histogram(name=name, description=f"RPC latency of {name}", unit=unit)
        _instruments[name] = instrument
    return instrument


def increment_counter(name: str, amount: int = 1, attributes: Dict[str, Any] = None):
    """Count an RPC event such as a received request or a dispatch error"""
    _instrument("counter", name, "1").add(amount, attributes or {})


def record_latency(name: str, value_ms: float, attributes: Dict[str, Any] = None):
    """Record how long a request took, in milliseconds"""
    _instrument("histogram", name, "ms").record(value_ms, attributes or {})
