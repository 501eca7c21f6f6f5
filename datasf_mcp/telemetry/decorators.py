"""
OpenTelemetry decorators for instrumenting DataSF MCP operations

Provides decorators for adding tracing to MCP tools and Socrata API calls.
"""

import functools
import inspect
import time
from typing import Callable, Optional
from datasf_mcp.logging import get_logger

from .config import get_tracer, is_telemetry_initialized
from .metrics import record_tool_invocation

logger = get_logger('TELEMETRY_DECORATORS')

# Parameter names never recorded on spans
SENSITIVE_PARAMS = {
    'token', 'app_token', 'password', 'secret', 'key', 'auth', 'authorization', 'api_key'
}


def trace_mcp_tool(tool_name: Optional[str] = None, record_args: bool = True):
    """
    Decorator to trace MCP tool execution.

    Args:
        tool_name: Custom span name for the tool (defaults to mcp_tool.<function name>)
        record_args: Whether to record function arguments as span attributes
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            success = True
            tracer = get_tracer() if is_telemetry_initialized() else None

            try:
                if not tracer:
                    return await func(*args, **kwargs)

                with tracer.start_as_current_span(tool_name or f"mcp_tool.{func.__name__}") as span:
                    from opentelemetry import trace

                    span.set_attribute("mcp.tool.name", func.__name__)
                    span.set_attribute("mcp.operation.type", "tool_execution")
                    if record_args:
                        _record_function_args(span, func, args, kwargs)

                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                        span.record_exception(e)
                        span.set_attribute("mcp.tool.error_type", type(e).__name__)
                        raise

                    span.set_status(trace.Status(trace.StatusCode.OK))
                    return result

            except Exception:
                success = False
                raise
            finally:
                attributes = {}
                if kwargs.get('dataset_id'):
                    attributes['dataset_id'] = kwargs['dataset_id']
                record_tool_invocation(func.__name__, time.time() - start_time, success, **attributes)

        return wrapper
    return decorator


def trace_socrata_api_call(operation: Optional[str] = None):
    """
    Decorator to trace Socrata API calls.

    Args:
        operation: Description of the API operation
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            tracer = get_tracer() if is_telemetry_initialized() else None
            if not tracer:
                return await func(*args, **kwargs)

            with tracer.start_as_current_span(f"socrata_api.{operation or func.__name__}") as span:
                from opentelemetry import trace

                span.set_attribute("socrata.operation.type", "api_call")
                span.set_attribute("socrata.function.name", func.__name__)
                for name in ('url', 'method', 'timeout'):
                    if name in kwargs:
                        span.set_attribute(f"socrata.api.{name}", str(kwargs[name]))

                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    span.set_attribute("socrata.api.error_type", type(e).__name__)
                    raise

                if isinstance(result, dict) and result.get('error'):
                    span.set_attribute("socrata.api.has_error", True)
                    if 'status_code' in result:
                        span.set_attribute("socrata.api.status_code", result['status_code'])

                span.set_status(trace.Status(trace.StatusCode.OK))
                return result

        return wrapper
    return decorator


def _record_function_args(span, func: Callable, args: tuple, kwargs: dict):
    """Record function arguments as span attributes, redacting sensitive ones."""
    try:
        bound_args = inspect.signature(func).bind_partial(*args, **kwargs)
        bound_args.apply_defaults()

        for param_name, value in bound_args.arguments.items():
            if param_name.lower() in SENSITIVE_PARAMS:
                span.set_attribute(f"mcp.args.{param_name}", "[REDACTED]")
            elif param_name == 'ctx':
                if hasattr(value, 'session_id'):
                    span.set_attribute("mcp.session.id", str(value.session_id))
            else:
                value_str = str(value)
                if len(value_str) <= 200:
                    span.set_attribute(f"mcp.args.{param_name}", value_str)
                else:
                    span.set_attribute(f"mcp.args.{param_name}_size", len(value_str))

    except Exception as e:
        logger.debug(f"failed to record function args | error: {e}")
