"""
Socrata dataset operations

Search and browse the catalog, and fetch dataset schemas from the Views API.
"""

from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional

import httpx

from datasf_mcp.correction.models import ColumnInfo, DatasetSchema
from datasf_mcp.exceptions import SocrataAPIError
from datasf_mcp.logging import catalog_logger, schema_logger, preview

from .client import make_socrata_request_strict, DEFAULT_TIMEOUT
from .config import get_catalog_url, get_domain, get_views_url


@dataclass
class DatasetSearchResult:
    """A catalog hit."""
    id: str
    name: str
    description: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


async def search_datasets(
    query: str,
    limit: int = 5,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[DatasetSearchResult]:
    """
    Search the catalog for datasets by keywords, most relevant first.

    Args:
        query: Search keywords
        limit: Maximum number of results
    """
    domain = get_domain()
    params = {
        "q": query,
        "domains": domain,
        "search_context": domain,
        "limit": limit,
        "offset": 0,
        "order": "relevance",
        "published": "true",
        "approval_status": "approved",
        "explicitly_hidden": "false",
    }

    catalog_logger.info(f"searching catalog | query:'{preview(query)}' | limit:{limit}")
    response = await make_socrata_request_strict(
        "GET", get_catalog_url(), params=params, timeout=timeout, transport=transport
    )
    return _parse_catalog_results(response)


async def list_datasets(
    category: Optional[str] = None,
    limit: int = 5,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[DatasetSearchResult]:
    """
    List recently updated datasets, optionally filtered by category.

    Args:
        category: Optional domain category filter
        limit: Maximum number of results
    """
    params: Dict[str, Any] = {
        "domains": get_domain(),
        "limit": limit,
        "order": "updatedAt",
    }
    if category:
        params["categories"] = category

    catalog_logger.info(f"listing datasets | category:{category or 'all'} | limit:{limit}")
    response = await make_socrata_request_strict(
        "GET", get_catalog_url(), params=params, timeout=timeout, transport=transport
    )
    return _parse_catalog_results(response)


def _parse_catalog_results(response: Any) -> List[DatasetSearchResult]:
    if not isinstance(response, dict):
        raise SocrataAPIError(f"Unexpected catalog response format: {type(response).__name__}")

    items = response.get("results") or []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise SocrataAPIError("Unexpected catalog response format: results must be a list of objects")

    results = []
    for item in items:
        resource = item.get("resource") or {}
        classification = item.get("classification") or {}
        if not isinstance(resource, dict) or not isinstance(classification, dict):
            raise SocrataAPIError("Unexpected catalog response format: resource and classification must be objects")
        results.append(DatasetSearchResult(
            id=resource.get("id") or "",
            name=resource.get("name") or "",
            description=resource.get("description") or "",
            category=classification.get("domain_category"),
        ))

    catalog_logger.debug(f"catalog results | count:{len(results)}")
    return results


async def fetch_schema(
    dataset_id: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> DatasetSchema:
    """
    Fetch a dataset's columns from the Views API.

    Not cached here; the correction orchestrator owns the schema cache.

    Raises:
        SocrataAPIError: If the request fails or the body is not a view object
    """
    schema_logger.info(f"fetching schema | dataset:{dataset_id}")
    response = await make_socrata_request_strict(
        "GET", get_views_url(dataset_id), timeout=timeout, transport=transport
    )

    if not isinstance(response, dict):
        raise SocrataAPIError(f"Unexpected views response format: {type(response).__name__}")

    raw_columns = response.get("columns") or []
    if not isinstance(raw_columns, list) or not all(isinstance(column, dict) for column in raw_columns):
        raise SocrataAPIError("Unexpected views response format: columns must be a list of objects")

    columns = [
        ColumnInfo(
            name=column.get("name") or "",
            field_name=column.get("fieldName") or "",
            data_type=column.get("dataTypeName") or "text",
        )
        for column in raw_columns
    ]

    schema = DatasetSchema(
        columns=columns,
        dataset_name=response.get("name") or "",
        row_count=_parse_row_count(response.get("rowsUpdatedAt")),
    )
    schema_logger.debug(f"schema fetched | dataset:{dataset_id} | columns:{len(columns)}")
    return schema


def _parse_row_count(value: Any) -> int:
    # The Views API has no row count; rowsUpdatedAt is what the catalog reports here
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0
