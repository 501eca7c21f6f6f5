"""
Input validation for tool arguments.

Runs before any network call; failures raise InputValidationError, which
the error classifier reports as a validation error.
"""

import re
from typing import Optional

from datasf_mcp.exceptions import InputValidationError

DATASET_ID_PATTERN = re.compile(r'^[a-z0-9]{4}-[a-z0-9]{4}$')

MAX_SEARCH_QUERY_LENGTH = 500
MAX_SOQL_LENGTH = 4000
MAX_RESULT_LIMIT = 20
DEFAULT_RESULT_LIMIT = 5


def validate_dataset_id(dataset_id: str) -> str:
    """Check a Socrata 4x4 id such as ``wg3w-h783``."""
    if not isinstance(dataset_id, str) or not DATASET_ID_PATTERN.match(dataset_id):
        raise InputValidationError(
            "Invalid dataset_id: dataset_id must match pattern xxxx-xxxx (lowercase alphanumeric)"
        )
    return dataset_id


def _validate_text(value: str, name: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"Invalid {name}: {name} must not be empty")
    if len(value) > max_length:
        raise InputValidationError(f"Invalid {name}: {name} must not exceed {max_length} characters")
    return value


def validate_search_query(query: str) -> str:
    return _validate_text(query, "query", MAX_SEARCH_QUERY_LENGTH)


def validate_soql_query(soql: str) -> str:
    return _validate_text(soql, "soql", MAX_SOQL_LENGTH)


def validate_limit(limit: Optional[int]) -> int:
    """Return the result limit, defaulting to 5. Must be an integer in 1..20."""
    if limit is None:
        return DEFAULT_RESULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_RESULT_LIMIT:
        raise InputValidationError(f"Invalid limit: limit must be an integer between 1 and {MAX_RESULT_LIMIT}")
    return limit
