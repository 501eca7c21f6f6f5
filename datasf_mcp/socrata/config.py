"""
Socrata API configuration

Handles environment variables, the optional app token header and the
endpoint URLs for the catalog, views and resource APIs.
"""

import os
from typing import Dict, Optional

DEFAULT_DOMAIN = "data.sfgov.org"
DEFAULT_CATALOG_URL = "https://api.us.socrata.com/api/catalog/v1"


def get_app_token() -> str:
    """App token from SOCRATA_APP_TOKEN, or an empty string for anonymous access."""
    return os.getenv("SOCRATA_APP_TOKEN", "")


def is_app_token_configured() -> bool:
    return bool(get_app_token())


def get_domain() -> str:
    return os.getenv("DATASF_DOMAIN", DEFAULT_DOMAIN)


def get_catalog_url() -> str:
    return os.getenv("SOCRATA_CATALOG_URL", DEFAULT_CATALOG_URL)


def get_views_url(dataset_id: str) -> str:
    """Views API URL returning dataset metadata and columns."""
    return f"https://{get_domain()}/api/views/{dataset_id}.json"


def get_resource_url(dataset_id: str) -> str:
    """Resource API URL accepting SoQL through the $query parameter."""
    return f"https://{get_domain()}/resource/{dataset_id}.json"


def get_socrata_headers(additional_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Get Socrata API headers, with X-App-Token when a token is configured.

    Args:
        additional_headers: Optional additional headers to merge

    Returns:
        Complete headers dictionary for API requests
    """
    headers = {"Accept": "application/json"}

    app_token = get_app_token()
    if app_token:
        headers["X-App-Token"] = app_token

    if additional_headers:
        headers.update(additional_headers)

    return headers
