"""
Socrata API client package

Provides organized modules for the Socrata catalog, views and resource APIs
used to search datasets, read schemas and run SoQL queries.
"""

from datasf_mcp.exceptions import SocrataAPIError, InputValidationError

from .client import make_socrata_request, make_socrata_request_strict
from .config import (
    get_app_token,
    is_app_token_configured,
    get_domain,
    get_catalog_url,
    get_views_url,
    get_resource_url,
    get_socrata_headers
)
from .datasets import search_datasets, list_datasets, fetch_schema, DatasetSearchResult
from .queries import query_resource
from .validation import (
    validate_dataset_id,
    validate_search_query,
    validate_soql_query,
    validate_limit
)

__all__ = [
    # Client functions
    'make_socrata_request',
    'make_socrata_request_strict',
    'SocrataAPIError',
    'InputValidationError',

    # Configuration
    'get_app_token',
    'is_app_token_configured',
    'get_domain',
    'get_catalog_url',
    'get_views_url',
    'get_resource_url',
    'get_socrata_headers',

    # Dataset operations
    'search_datasets',
    'list_datasets',
    'fetch_schema',
    'DatasetSearchResult',

    # Query operations
    'query_resource',

    # Validation
    'validate_dataset_id',
    'validate_search_query',
    'validate_soql_query',
    'validate_limit'
]
