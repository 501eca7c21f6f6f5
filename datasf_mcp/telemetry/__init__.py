"""
OpenTelemetry instrumentation package for the DataSF MCP server

Provides centralized configuration and initialization for OpenTelemetry
tracing and metrics across the server.
"""

from .config import (
    TelemetrySettings,
    initialize_telemetry,
    get_tracer,
    get_meter,
    shutdown_telemetry,
    is_telemetry_enabled,
    get_telemetry_status
)

from .decorators import (
    trace_mcp_tool,
    trace_socrata_api_call
)

from .metrics import (
    initialize_metrics,
    record_tool_invocation,
    record_api_request,
    record_corrections,
    record_error,
    get_metrics_status
)

__all__ = [
    # Core configuration
    'TelemetrySettings',
    'initialize_telemetry',
    'get_tracer',
    'get_meter',
    'shutdown_telemetry',
    'is_telemetry_enabled',
    'get_telemetry_status',

    # Decorators
    'trace_mcp_tool',
    'trace_socrata_api_call',

    # Metrics
    'initialize_metrics',
    'record_tool_invocation',
    'record_api_request',
    'record_corrections',
    'record_error',
    'get_metrics_status'
]
