"""
Tool handlers behind the MCP server.

Each handler validates its arguments, runs the operation and returns a
JSON-serializable dict: the result payload on success or a classified
error payload (``error``, ``error_type``, optional ``details``) on failure.
"""

from typing import Any, Dict, Optional

from datasf_mcp.correction import ClassifiedError, CorrectionOrchestrator, classify_error, handle_api_call
from datasf_mcp.exceptions import InputValidationError
from datasf_mcp.socrata import (
    search_datasets,
    list_datasets,
    validate_dataset_id,
    validate_search_query,
    validate_soql_query,
    validate_limit
)


def _validation_error(error: InputValidationError) -> Dict[str, Any]:
    return classify_error(error).to_dict()


async def search_datasf(
    orchestrator: CorrectionOrchestrator,
    query: str,
    limit: Optional[int] = None
) -> Dict[str, Any]:
    try:
        query = validate_search_query(query)
        limit = validate_limit(limit)
    except InputValidationError as e:
        return _validation_error(e)

    result = await handle_api_call(
        lambda: search_datasets(query, limit, timeout=orchestrator.config.timeout_seconds),
        timeout=orchestrator.config.timeout_seconds,
        operation="search_datasets"
    )
    if isinstance(result, ClassifiedError):
        return result.to_dict()

    response: Dict[str, Any] = {
        "results": [item.to_dict() for item in result],
        "count": len(result),
    }
    if not result:
        response["message"] = "No results found"
    return response


async def list_datasf(
    orchestrator: CorrectionOrchestrator,
    category: Optional[str] = None,
    limit: Optional[int] = None
) -> Dict[str, Any]:
    try:
        limit = validate_limit(limit)
    except InputValidationError as e:
        return _validation_error(e)

    result = await handle_api_call(
        lambda: list_datasets(category, limit, timeout=orchestrator.config.timeout_seconds),
        timeout=orchestrator.config.timeout_seconds,
        operation="list_datasets"
    )
    if isinstance(result, ClassifiedError):
        return result.to_dict()

    return {
        "results": [item.to_dict() for item in result],
        "count": len(result),
        "category": category or "all",
    }


async def get_schema(orchestrator: CorrectionOrchestrator, dataset_id: str) -> Dict[str, Any]:
    try:
        dataset_id = validate_dataset_id(dataset_id)
    except InputValidationError as e:
        return _validation_error(e)

    lookup = await orchestrator.resolve_schema(dataset_id)
    if isinstance(lookup, ClassifiedError):
        return lookup.to_dict()
    return lookup.to_dict(dataset_id)


async def query_datasf(
    orchestrator: CorrectionOrchestrator,
    dataset_id: str,
    soql: str,
    auto_correct: bool = True
) -> Dict[str, Any]:
    try:
        dataset_id = validate_dataset_id(dataset_id)
        soql = validate_soql_query(soql)
    except InputValidationError as e:
        return _validation_error(e)

    outcome = await orchestrator.run_query(dataset_id, soql, auto_correct=auto_correct)
    return outcome.to_dict()
