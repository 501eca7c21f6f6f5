"""
Logging utilities for the DataSF MCP server.
"""

from .mcp_logger import (
    get_logger,
    set_session_context,
    log_tool_call,
    preview,
    session_logger,
    query_logger,
    schema_logger,
    cache_logger,
    correction_logger,
    catalog_logger,
)

__all__ = [
    'get_logger',
    'set_session_context',
    'log_tool_call',
    'preview',
    'session_logger',
    'query_logger',
    'schema_logger',
    'cache_logger',
    'correction_logger',
    'catalog_logger',
]
