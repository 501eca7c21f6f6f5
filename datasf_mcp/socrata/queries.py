"""
Socrata query operations

Runs SoQL queries against a dataset through the resource API.
"""

from typing import Any, List, Optional

import httpx

from datasf_mcp.exceptions import SocrataAPIError
from datasf_mcp.logging import get_logger, preview

from .client import make_socrata_request_strict, DEFAULT_TIMEOUT
from .config import get_resource_url

logger = get_logger('QUERY')


async def query_resource(
    dataset_id: str,
    soql: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[Any]:
    """
    Execute a SoQL query and return the result rows.

    Args:
        dataset_id: The 4x4 dataset id
        soql: Full SoQL query, sent as the $query parameter

    Returns:
        Rows as decoded JSON objects, unmodified

    Raises:
        SocrataAPIError: If the query fails or the body is not a list of rows
    """
    logger.info(f"executing SoQL query | dataset:{dataset_id} | query:'{preview(soql)}'")
    response = await make_socrata_request_strict(
        "GET",
        get_resource_url(dataset_id),
        params={"$query": soql},
        timeout=timeout,
        transport=transport
    )

    if not isinstance(response, list):
        raise SocrataAPIError(
            f"Unexpected query response format: expected a list of rows, got {type(response).__name__}"
        )

    logger.debug(f"query returned | dataset:{dataset_id} | rows:{len(response)}")
    return response
