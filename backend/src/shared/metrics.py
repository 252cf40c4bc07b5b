import sys

from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource


def setup_metrics(app_name: str) -> MeterProvider:
    """Configure OpenTelemetry metrics.

    Returns the provider so a short-lived process can flush it on exit.
    """

    resource = Resource.create({"service.name": app_name})

    # Pull model for a long-running caller that exposes /metrics
    prometheus_reader = PrometheusMetricReader()

    # Console export, flushed when the provider shuts down
    console_reader = PeriodicExportingMetricReader(ConsoleMetricExporter(out=sys.stderr))

    provider = MeterProvider(resource=resource, metric_readers=[prometheus_reader, console_reader])

    metrics.set_meter_provider(provider)
    return provider
