"""
Retry Logic Utilities for External API Calls
Provides an exponential backoff policy for asynchronous httpx requests
"""
import logging
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ..logger import setup_logger
from ..config import ConfigDefaults

logger = setup_logger(__name__)

# tenacity's before_sleep_log expects a stdlib logger
_stdlib_logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


# ============================================
# RETRY CONFIGURATIONS
# ============================================

class RetryConfig:
    """Retry configuration constants"""

    # Retries after the first attempt, so DEFAULT_MAX_RETRIES + 1 sends in total
    DEFAULT_MAX_RETRIES = ConfigDefaults.MAX_RETRIES
    # Wait before retry n (n starting at 1) is DEFAULT_BACKOFF_BASE ** n seconds
    DEFAULT_BACKOFF_BASE = ConfigDefaults.BACKOFF_BASE


# ============================================
# RETRY CONDITION FUNCTIONS
# ============================================

def is_server_error(status_code: int) -> bool:
    """Check if an HTTP status code is a server error (5xx)"""
    return 500 <= status_code < 600


def is_retryable_response(response: httpx.Response) -> bool:
    """
    Check if a response should be retried

    Only 5xx responses are transient. 4xx responses (including 401 and 404)
    are left to the caller.
    """
    if is_server_error(response.status_code):
        logger.warning(f"Retryable HTTP status {response.status_code} from {response.request.url}")
        return True
    return False


def is_retryable_exception(exception: BaseException) -> bool:
    """Network-level failures (connect, read, timeouts) are retryable"""
    return isinstance(exception, httpx.TransportError)


# ============================================
# RETRY POLICY
# ============================================

def backoff_delay(retry_number: int, base: float = RetryConfig.DEFAULT_BACKOFF_BASE) -> float:
    """
    Seconds to wait before retry ``retry_number`` (1-based)

    Example:
        backoff_delay(1) == 2.0, backoff_delay(2) == 4.0, backoff_delay(3) == 8.0
    """
    return base ** retry_number


def http_retrying(
    max_retries: int = RetryConfig.DEFAULT_MAX_RETRIES,
    backoff_base: float = RetryConfig.DEFAULT_BACKOFF_BASE,
    sleep: Optional[SleepFn] = None,
) -> AsyncRetrying:
    """
    Build an AsyncRetrying controller for httpx requests

    Retries on ``httpx.TransportError`` and on 5xx responses. When the budget
    is spent tenacity raises ``RetryError`` whose ``last_attempt`` holds the
    final response or exception. ``asyncio.CancelledError`` is never retried.

    Args:
        max_retries: Retries after the initial attempt
        backoff_base: Base of the exponential backoff
        sleep: Awaitable sleep function (defaults to asyncio.sleep)

    Example:
        response = await http_retrying()(lambda: client.send(build()))
    """
    kwargs = {}
    if sleep is not None:
        kwargs['sleep'] = sleep

    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        # tenacity computes multiplier * exp_base ** (attempt - 1); with
        # multiplier == exp_base this is exp_base ** attempt
        wait=wait_exponential(multiplier=backoff_base, exp_base=backoff_base),
        retry=(
            retry_if_exception_type(httpx.TransportError)
            | retry_if_result(is_retryable_response)
        ),
        before_sleep=before_sleep_log(_stdlib_logger, logging.INFO),
        reraise=False,
        **kwargs
    )
