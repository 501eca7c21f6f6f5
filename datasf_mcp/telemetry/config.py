"""
OpenTelemetry setup for the DataSF MCP server.

Tracing and metrics are exported over OTLP gRPC, and the httpx client used
for Socrata calls is instrumented so every catalog, views and resource
request shows up as a child span of the tool that made it. Everything here
is optional at runtime: with ``OTEL_TELEMETRY_ENABLED=false`` the tracer and
meter stay unset and the decorators and recorders become no-ops.
"""

import os
import traceback
import sys
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from opentelemetry import trace, metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from datasf_mcp import __version__
from datasf_mcp.logging import get_logger

logger = get_logger('TELEMETRY')

_TRUTHY = ('true', '1', 'yes', 'on')

_tracer = None
_meter = None
_trace_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None


@dataclass(frozen=True)
class TelemetrySettings:
    enabled: bool = True
    service_name: str = 'datasf-mcp'
    endpoint: str = 'http://localhost:4317'
    environment: str = 'development'
    export_interval_millis: int = 10000
    insecure: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TelemetrySettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            enabled=env.get('OTEL_TELEMETRY_ENABLED', 'true').lower() in _TRUTHY,
            service_name=env.get('OTEL_SERVICE_NAME', defaults.service_name),
            endpoint=env.get('OTEL_EXPORTER_OTLP_ENDPOINT', defaults.endpoint),
            environment=env.get('DEPLOYMENT_ENVIRONMENT', defaults.environment),
            export_interval_millis=int(env.get('OTEL_METRIC_EXPORT_INTERVAL', defaults.export_interval_millis)),
            insecure=env.get('OTEL_EXPORTER_OTLP_INSECURE', 'true').lower() in _TRUTHY,
        )


def is_telemetry_enabled() -> bool:
    return TelemetrySettings.from_env().enabled


def is_telemetry_initialized() -> bool:
    return _tracer is not None


def _build_resource(settings: TelemetrySettings) -> Resource:
    return Resource.create({
        "service.name": settings.service_name,
        "service.version": __version__,
        "service.namespace": "datasf",
        "deployment.environment": settings.environment,
    })


def initialize_telemetry(settings: Optional[TelemetrySettings] = None) -> bool:
    """
    Install the OTLP tracer and meter providers and instrument httpx.

    Args:
        settings: Export settings, read from the environment when omitted

    Returns:
        True if telemetry is active after the call
    """
    global _tracer, _meter, _trace_provider, _meter_provider

    if is_telemetry_initialized():
        return True

    settings = settings or TelemetrySettings.from_env()
    if not settings.enabled:
        logger.info("telemetry disabled via configuration")
        return False

    logger.info(f"initializing telemetry | endpoint:{settings.endpoint} | service:{settings.service_name}")

    try:
        resource = _build_resource(settings)

        _trace_provider = TracerProvider(resource=resource)
        _trace_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint, insecure=settings.insecure))
        )
        trace.set_tracer_provider(_trace_provider)

        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=settings.endpoint, insecure=settings.insecure),
            export_interval_millis=settings.export_interval_millis
        )
        _meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
        metrics.set_meter_provider(_meter_provider)

        HTTPXClientInstrumentor().instrument()
    except Exception as e:
        logger.error(f"telemetry initialization failed | error: {e}")
        traceback.print_exc(file=sys.stderr)
        _trace_provider = _meter_provider = None
        return False

    _tracer = trace.get_tracer('datasf_mcp')
    _meter = metrics.get_meter('datasf_mcp')
    logger.info("telemetry initialization complete")
    return True


def get_tracer():
    """Tracer for tool and API spans, or None when telemetry is off."""
    return _tracer


def get_meter():
    if _meter is None:
        logger.debug("telemetry not initialized | meter unavailable")
    return _meter


def shutdown_telemetry():
    """Flush pending spans and metrics and drop the providers."""
    global _tracer, _meter, _trace_provider, _meter_provider

    if not is_telemetry_initialized():
        return

    try:
        HTTPXClientInstrumentor().uninstrument()
        if _trace_provider is not None:
            _trace_provider.shutdown()
        if _meter_provider is not None:
            _meter_provider.shutdown()
        logger.info("telemetry shutdown complete")
    except Exception as e:
        logger.error(f"telemetry shutdown error | error: {e}")
    finally:
        _tracer = _meter = None
        _trace_provider = _meter_provider = None


def get_telemetry_status() -> Dict[str, Any]:
    status = asdict(TelemetrySettings.from_env())
    status.update(
        initialized=is_telemetry_initialized(),
        meter_available=_meter is not None,
    )
    return status
