#!/usr/bin/env python3
"""
DataSF MCP Server
A Model Context Protocol server for discovering, inspecting and querying
San Francisco open data (Socrata) with automatic column-name correction.
"""

import json
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from fastmcp import FastMCP, Context

from datasf_mcp import __version__
from datasf_mcp import tools
from datasf_mcp.correction import CorrectionConfig, CorrectionOrchestrator, SchemaCache
from datasf_mcp.logging import log_tool_call, session_logger
from datasf_mcp.socrata import fetch_schema, query_resource, is_app_token_configured
from datasf_mcp.telemetry import initialize_telemetry, initialize_metrics, trace_mcp_tool

# Initialize OpenTelemetry instrumentation early
telemetry_enabled = initialize_telemetry()
metrics_enabled = initialize_metrics() if telemetry_enabled else False

config = CorrectionConfig.from_env()

# One schema cache per process, shared by every request
schema_cache = SchemaCache(ttl_seconds=config.cache_ttl_seconds)


async def _fetch_schema(dataset_id: str):
    return await fetch_schema(dataset_id, timeout=config.timeout_seconds)


async def _execute_query(dataset_id: str, soql: str):
    return await query_resource(dataset_id, soql, timeout=config.timeout_seconds)


orchestrator = CorrectionOrchestrator(
    cache=schema_cache,
    fetch_schema=_fetch_schema,
    execute_query=_execute_query,
    config=config
)

mcp = FastMCP(name="datasf-mcp")


def _session_id(ctx: Optional[Context]) -> Optional[str]:
    try:
        return getattr(ctx, 'session_id', None)
    except (RuntimeError, ValueError):
        # No active request session (e.g. direct invocation)
        return None


def _to_text(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, default=str)


@mcp.tool()
@trace_mcp_tool(tool_name="search_datasf")
async def search_datasf(ctx: Context, query: str, limit: int = 5) -> str:
    """
    Search for public datasets in San Francisco's open data portal by keywords.
    Returns dataset IDs, names, and descriptions.

    Args:
        query: Search keywords (1-500 characters)
        limit: Maximum number of results (default: 5, max: 20)
    """
    log_tool_call("search_datasf", _session_id(ctx), query=query, limit=limit)
    return _to_text(await tools.search_datasf(orchestrator, query, limit))


@mcp.tool()
@trace_mcp_tool(tool_name="list_datasf")
async def list_datasf(ctx: Context, category: Optional[str] = None, limit: int = 5) -> str:
    """
    Browse available datasets from San Francisco's open data portal, most
    recently updated first. Optionally filter by category.

    Args:
        category: Optional category filter
        limit: Maximum number of results (default: 5, max: 20)
    """
    log_tool_call("list_datasf", _session_id(ctx), category=category, limit=limit)
    return _to_text(await tools.list_datasf(orchestrator, category, limit))


@mcp.tool()
@trace_mcp_tool(tool_name="get_schema")
async def get_schema(ctx: Context, dataset_id: str) -> str:
    """
    Get the schema (columns and data types) for a specific dataset.
    Call this before writing queries to learn the correct field names.

    Args:
        dataset_id: Dataset 4x4 ID (format: xxxx-xxxx)
    """
    log_tool_call("get_schema", _session_id(ctx), dataset_id=dataset_id)
    return _to_text(await tools.get_schema(orchestrator, dataset_id))


@mcp.tool()
@trace_mcp_tool(tool_name="query_datasf")
async def query_datasf(ctx: Context, dataset_id: str, soql: str, auto_correct: bool = True) -> str:
    """
    Execute a SoQL (Socrata Query Language) query against a dataset.
    Returns query results as JSON.

    Column names are auto-corrected against the dataset schema unless
    auto_correct is false; any rewrites are listed under "corrections".
    At most 1000 rows are returned; "truncated" is true when more matched.

    Args:
        dataset_id: Dataset 4x4 ID (format: xxxx-xxxx)
        soql: SoQL query string (1-4000 characters)
        auto_correct: Enable automatic column name correction (default: true)
    """
    log_tool_call("query_datasf", _session_id(ctx), dataset_id=dataset_id, soql=soql, auto_correct=auto_correct)
    return _to_text(await tools.query_datasf(orchestrator, dataset_id, soql, auto_correct))


def log_startup_banner():
    session_logger.info(f"DataSF MCP Server v{__version__}")
    session_logger.info(
        f"schema cache ready | ttl:{config.cache_ttl_seconds:g}s | fuzzy threshold:{config.fuzzy_threshold} | "
        f"max records:{config.max_records} | timeout:{config.timeout_seconds:g}s"
    )
    session_logger.info(
        f"app token: {'configured' if is_app_token_configured() else 'not configured (using public access)'}"
    )
    session_logger.info("registered tools | search_datasf, list_datasf, get_schema, query_datasf")
    session_logger.info(f"telemetry | tracing:{telemetry_enabled} | metrics:{metrics_enabled}")


if __name__ == "__main__":
    import atexit
    import signal
    import sys

    def shutdown_handler():
        if telemetry_enabled:
            from datasf_mcp.telemetry import shutdown_telemetry
            shutdown_telemetry()

    def signal_handler(signum, frame):
        shutdown_handler()
        sys.exit(0)

    atexit.register(shutdown_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    log_startup_banner()
    mcp.run()
