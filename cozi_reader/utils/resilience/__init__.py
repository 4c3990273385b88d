"""
Resilience Utilities

Provides retry logic for external API calls.
"""

from .retry import (
    RetryConfig,
    SleepFn,
    backoff_delay,
    http_retrying,
    is_retryable_exception,
    is_retryable_response,
    is_server_error,
)

__all__ = [
    "RetryConfig",
    "SleepFn",
    "backoff_delay",
    "http_retrying",
    "is_retryable_exception",
    "is_retryable_response",
    "is_server_error",
]
