"""
Socrata API HTTP client

Provides the base HTTP client functionality for making requests to the
Socrata catalog, views and resource APIs with error handling, logging and
response processing.
"""

import time
from typing import Dict, Any, Optional

import httpx

from datasf_mcp.exceptions import SocrataAPIError
from datasf_mcp.logging import get_logger
from datasf_mcp.telemetry.decorators import trace_socrata_api_call
from datasf_mcp.telemetry.metrics import record_api_request

from .config import get_socrata_headers

logger = get_logger('HTTP')

DEFAULT_TIMEOUT = 30.0


@trace_socrata_api_call(operation="http_request")
async def make_socrata_request(
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Any:
    """
    Make a request to a Socrata API.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Full endpoint URL
        params: Query parameters
        headers: Additional headers (merged with the default headers)
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used by tests

    Returns:
        Decoded JSON body, or an error dictionary with ``error: True``

    Raises:
        httpx.TimeoutException: If the request exceeds the timeout
    """
    request_headers = get_socrata_headers(headers)
    logger.debug(f"{method} {url} | params:{_summarize_params(params)} | headers:{_sanitize_headers_for_logging(request_headers)}")

    start_time = time.time()
    async with httpx.AsyncClient(transport=transport) as client:
        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                headers=request_headers,
                timeout=timeout
            )
        except httpx.TimeoutException:
            logger.warning(f"request timed out | url:{url} | timeout:{timeout}s")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error: {str(e)}")
            return {
                "error": True,
                "message": f"HTTP error: {str(e) or type(e).__name__}"
            }

    duration = time.time() - start_time
    record_api_request(url.split('?')[0], method, response.status_code, duration)

    if response.status_code >= 400:
        logger.warning(f"response {response.status_code} | size:{len(response.text)} | duration:{duration:.3f}s")
    else:
        logger.debug(f"response {response.status_code} | size:{len(response.text)} | duration:{duration:.3f}s")

    return _process_response(response)


def _process_response(response: httpx.Response) -> Any:
    """
    Process HTTP response and return appropriate data structure.

    Args:
        response: HTTP response object

    Returns:
        Decoded JSON body, or an error dictionary for error statuses and bad JSON
    """
    if response.status_code >= 400:
        logger.warning(f"API error {response.status_code}: {response.text[:200]}")

        error = {
            "error": True,
            "status_code": response.status_code,
            "message": response.text or response.reason_phrase
        }

        # Socrata error bodies carry message plus code or errorCode
        try:
            error_json = response.json()
        except ValueError:
            return error

        if isinstance(error_json, dict):
            remote_message = error_json.get("message") or error_json.get("error")
            if isinstance(remote_message, str) and remote_message:
                error["message"] = remote_message
            error_code = error_json.get("errorCode") or error_json.get("code")
            if error_code:
                error["error_code"] = str(error_code)
        return error

    try:
        return response.json()
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError both derive from ValueError
        logger.error(f"JSON decode failed: {e}")
        return {
            "error": True,
            "status_code": response.status_code,
            "message": f"Invalid JSON response: {str(e)}"
        }


def _summarize_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    if not params:
        return {}
    return {k: str(v)[:100] for k, v in params.items()}


def _sanitize_headers_for_logging(headers: Dict[str, str]) -> Dict[str, str]:
    """
    Sanitize headers for logging by redacting sensitive information.

    Args:
        headers: Original headers dictionary

    Returns:
        Sanitized headers safe for logging
    """
    sensitive_keys = {"authorization", "cookie", "x-app-token", "x-api-key"}
    return {
        key: "[REDACTED]" if key.lower() in sensitive_keys else value
        for key, value in headers.items()
    }


@trace_socrata_api_call(operation="http_request_strict")
async def make_socrata_request_strict(
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Any:
    """
    Make a request to a Socrata API with strict error handling.

    Unlike make_socrata_request, this function raises exceptions for errors
    instead of returning error dictionaries.

    Raises:
        SocrataAPIError: For error statuses, transport failures and malformed bodies
        httpx.TimeoutException: If the request exceeds the timeout
    """
    response = await make_socrata_request(
        method=method,
        url=url,
        params=params,
        headers=headers,
        timeout=timeout,
        transport=transport
    )

    if isinstance(response, dict) and response.get("error") is True and "message" in response:
        raise SocrataAPIError(
            message=response.get("message", "Unknown API error"),
            status_code=response.get("status_code"),
            error_code=response.get("error_code"),
            response_data=response
        )

    return response
