"""
Error classification for external calls.

Every failed call resolves to exactly one ErrorKind, checked in priority
order: validation, timeout, not_found, rate_limit, then api_error for
anything else the remote side or the transport produced.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar, Union

import httpx

from datasf_mcp.exceptions import InputValidationError, SocrataAPIError
from datasf_mcp.logging import get_logger
from datasf_mcp.telemetry.metrics import record_error

from .models import ClassifiedError, ErrorKind

logger = get_logger('ERRORS')

T = TypeVar('T')

# Failures that come from an external call or from input checks before it
CLASSIFIABLE_ERRORS = (
    InputValidationError,
    asyncio.TimeoutError,
    httpx.TimeoutException,
    SocrataAPIError,
    httpx.HTTPError,
)


def _remote_message(error: SocrataAPIError) -> Optional[str]:
    data = error.response_data
    for key in ("message", "error"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def classify_error(error: BaseException, timeout: Optional[float] = None) -> ClassifiedError:
    """
    Map an exception from an external call onto a ClassifiedError.

    Args:
        error: The exception raised by the call
        timeout: The time budget the call ran under, used in the timeout message

    Raises:
        TypeError: If the exception is not one the classifier understands
    """
    if isinstance(error, InputValidationError):
        return ClassifiedError(kind=ErrorKind.VALIDATION, message=str(error))

    # Timeout wins over whatever status the remote side may have sent
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        if timeout is not None:
            message = f"Request timed out after {timeout:g} seconds"
        else:
            message = "Request timed out"
        return ClassifiedError(kind=ErrorKind.TIMEOUT, message=message)

    if isinstance(error, SocrataAPIError):
        remote_message = _remote_message(error)

        if error.status_code == 404:
            return ClassifiedError(kind=ErrorKind.NOT_FOUND, message="Dataset not found", details=remote_message)

        if error.status_code == 429:
            return ClassifiedError(
                kind=ErrorKind.RATE_LIMIT, message="Rate limited. Try again later.", details=remote_message
            )

        return ClassifiedError(
            kind=ErrorKind.API_ERROR,
            message=remote_message or error.message or "Socrata API request failed",
            details=error.error_code
        )

    if isinstance(error, httpx.HTTPError):
        return ClassifiedError(kind=ErrorKind.API_ERROR, message=str(error) or "Network error occurred")

    raise TypeError(f"Cannot classify {type(error).__name__}: {error}")


async def handle_api_call(
    call: Callable[[], Awaitable[T]],
    timeout: Optional[float] = None,
    operation: str = "api_call"
) -> Union[T, ClassifiedError]:
    """
    Run an external call and return its result or a ClassifiedError.

    Args:
        call: Zero-argument coroutine function performing the call
        timeout: Seconds before the call is cancelled and reported as a timeout
        operation: Name used in logs and error metrics

    Exceptions outside the classifiable set propagate unchanged.
    """
    try:
        if timeout is None:
            return await call()
        return await asyncio.wait_for(call(), timeout)
    except CLASSIFIABLE_ERRORS as e:
        classified = classify_error(e, timeout=timeout)
        logger.warning(f"{operation} failed | kind:{classified.kind.value} | message:{classified.message[:200]}")
        record_error(classified.kind.value, operation)
        return classified
