"""Request and probe latency metrics with OpenTelemetry support."""
from typing import Optional
from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

_meter = metrics.get_meter("bolt_proxy")
query_duration_histogram = _meter.create_histogram(
    name="bolt_proxy.query.duration",
    description="Duration of POST /query executions in seconds",
    unit="s",
)
probe_duration_histogram = _meter.create_histogram(
    name="bolt_proxy.probe.duration",
    description="Duration of diagnostic probes in seconds",
    unit="s",
)


def configure_metrics(exporter_type: str = "none", otlp_endpoint: Optional[str] = None):
    """Configures the OpenTelemetry Metric Provider.

    Args:
        exporter_type: 'none', 'console', or 'otlp'
        otlp_endpoint: Optional endpoint for OTLP exporter
    """
    if exporter_type == "none":
        return

    reader = None
    if exporter_type == "console":
        reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    elif exporter_type == "otlp":
        endpoint = otlp_endpoint or "http://localhost:4317"
        reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=endpoint))

    if reader:
        provider = MeterProvider(metric_readers=[reader])
        metrics.set_meter_provider(provider)


def record_query(duration: float, outcome: str) -> None:
    query_duration_histogram.record(duration, attributes={"outcome": outcome})


def record_probe(probe: str, duration: float, outcome: str) -> None:
    probe_duration_histogram.record(duration, attributes={"probe": probe, "outcome": outcome})
