"""
OpenTelemetry metrics collection for DataSF MCP operations

Counts tool invocations, Socrata API requests, applied column corrections
and classified errors.
"""

from typing import Dict, Any
from datasf_mcp.logging import get_logger

from .config import get_meter

logger = get_logger('TELEMETRY_METRICS')

# Global metrics state
_meter = None
_metrics_enabled = False

# Metric instruments
_tool_invocation_counter = None
_tool_duration_histogram = None
_api_request_counter = None
_api_duration_histogram = None
_correction_counter = None
_error_counter = None


def initialize_metrics():
    """Initialize OpenTelemetry metrics instruments."""
    global _meter, _metrics_enabled
    global _tool_invocation_counter, _tool_duration_histogram
    global _api_request_counter, _api_duration_histogram
    global _correction_counter, _error_counter

    try:
        _meter = get_meter()

        if not _meter:
            logger.debug("metrics not available | meter not initialized")
            return False

        _tool_invocation_counter = _meter.create_counter(
            name="mcp_tool_invocations_total",
            description="Total number of MCP tool invocations",
            unit="1"
        )
        _tool_duration_histogram = _meter.create_histogram(
            name="mcp_tool_duration_seconds",
            description="Duration of MCP tool executions",
            unit="s"
        )

        _api_request_counter = _meter.create_counter(
            name="socrata_api_requests_total",
            description="Total number of Socrata API requests",
            unit="1"
        )
        _api_duration_histogram = _meter.create_histogram(
            name="socrata_api_duration_seconds",
            description="Duration of Socrata API requests",
            unit="s"
        )

        _correction_counter = _meter.create_counter(
            name="datasf_column_corrections_total",
            description="Total number of column names rewritten by auto-correction",
            unit="1"
        )

        _error_counter = _meter.create_counter(
            name="mcp_errors_total",
            description="Total number of classified errors by kind",
            unit="1"
        )

        _metrics_enabled = True
        logger.info("metrics initialization complete")
        return True

    except Exception as e:
        logger.error(f"metrics initialization failed | error: {e}")
        return False


def record_tool_invocation(tool_name: str, duration: float, success: bool, **attributes):
    """
    Record metrics for MCP tool invocations.

    Args:
        tool_name: Name of the MCP tool
        duration: Execution duration in seconds
        success: Whether the invocation was successful
        **attributes: Additional attributes to record
    """
    if not _metrics_enabled or not _tool_invocation_counter:
        return

    try:
        metric_attributes = {
            "tool_name": tool_name,
            "status": "success" if success else "error"
        }
        for key, value in attributes.items():
            if isinstance(value, (str, int, float, bool)):
                metric_attributes[f"tool.{key}"] = str(value)

        _tool_invocation_counter.add(1, metric_attributes)
        _tool_duration_histogram.record(duration, metric_attributes)

        logger.debug(f"recorded tool metrics | tool:{tool_name} | duration:{duration:.3f}s | success:{success}")

    except Exception as e:
        logger.debug(f"failed to record tool metrics | error: {e}")


def record_api_request(endpoint: str, method: str, status_code: int, duration: float):
    """Record metrics for a Socrata API request."""
    if not _metrics_enabled or not _api_request_counter:
        return

    try:
        metric_attributes = {
            "endpoint": endpoint,
            "method": method,
            "status_code": str(status_code),
            "status": "success" if status_code < 400 else "error"
        }
        _api_request_counter.add(1, metric_attributes)
        _api_duration_histogram.record(duration, metric_attributes)

        logger.debug(f"recorded API metrics | endpoint:{endpoint} | status:{status_code} | duration:{duration:.3f}s")

    except Exception as e:
        logger.debug(f"failed to record API metrics | error: {e}")


def record_corrections(dataset_id: str, count: int):
    """Record how many column names a correction pass rewrote."""
    if not _metrics_enabled or not _correction_counter or count <= 0:
        return

    try:
        _correction_counter.add(count, {"dataset_id": dataset_id})
    except Exception as e:
        logger.debug(f"failed to record correction metric | error: {e}")


def record_error(error_kind: str, operation: str):
    """
    Record a classified error.

    Args:
        error_kind: Classified error kind (validation, not_found, ...)
        operation: Operation where the error occurred
    """
    if not _metrics_enabled or not _error_counter:
        return

    try:
        _error_counter.add(1, {"error_type": error_kind, "operation": operation})
        logger.debug(f"recorded error metric | type:{error_kind} | operation:{operation}")
    except Exception as e:
        logger.debug(f"failed to record error metric | error: {e}")


def get_metrics_status() -> Dict[str, Any]:
    """Get the current metrics system status."""
    return {
        "enabled": _metrics_enabled,
        "meter_available": _meter is not None,
        "instruments": {
            "tool_invocation_counter": _tool_invocation_counter is not None,
            "api_request_counter": _api_request_counter is not None,
            "correction_counter": _correction_counter is not None,
            "error_counter": _error_counter is not None
        }
    }
