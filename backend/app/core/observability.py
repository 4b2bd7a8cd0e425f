from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import ApiSettings

SERVICE_NAME = "timecard-api"


def build_resource(settings: ApiSettings) -> Resource:
    return Resource.create({"service.name": SERVICE_NAME, "deployment.env": settings.env})


def configure_tracing(settings: ApiSettings, otlp_endpoint: Optional[str] = None) -> None:
    tracer_provider = TracerProvider(resource=build_resource(settings))
    endpoint = otlp_endpoint or settings.otlp_endpoint
    if endpoint:
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
        )
    trace.set_tracer_provider(tracer_provider)


def configure_metrics(settings: ApiSettings, otlp_endpoint: Optional[str] = None) -> None:
    endpoint = otlp_endpoint or settings.otlp_endpoint
    provider_kwargs = {"resource": build_resource(settings)}
    if endpoint:
        provider_kwargs["metric_readers"] = [PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=endpoint))]
    metrics.set_meter_provider(MeterProvider(**provider_kwargs))


def configure_observability(settings: ApiSettings) -> None:
    configure_tracing(settings)
    configure_metrics(settings)


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def get_meter(name: str) -> metrics.Meter:
    return metrics.get_meter(name)
