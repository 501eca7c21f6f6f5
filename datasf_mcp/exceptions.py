"""
Exceptions raised by the Socrata client and input validation.
"""

from typing import Any, Dict, Optional


class InputValidationError(ValueError):
    """Caller input rejected before any network call was made."""


class SocrataAPIError(Exception):
    """A Socrata API call failed with an error status or an unusable response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        response_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.response_data = response_data or {}
