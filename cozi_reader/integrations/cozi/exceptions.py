"""
Cozi-specific exceptions

Provides structured error handling for Cozi API operations.

Hierarchy:
    CoziServiceException
    ├── AuthError           credentials rejected / malformed login response
    ├── StateError          operation attempted before login
    ├── ConfigurationError  credentials missing from configuration
    ├── TransportError      retry budget exhausted on transient failures
    ├── ApiError            non-success, non-retryable HTTP status
    │   └── NotFoundError   resource absent under every API version tried
    └── ProtocolError       2xx response with an empty or unparseable body
"""
from typing import Any, Dict, Optional, Sequence

import httpx

SERVICE_NAME = "Cozi"


class CoziServiceException(Exception):
    """Base exception for Cozi service operations"""

    def __init__(
        self,
        message: str,
        service_name: str = SERVICE_NAME,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        self.message = message
        self.service_name = service_name
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(service={self.service_name}, message={self.message})"


class AuthError(CoziServiceException):
    """Exception raised when Cozi rejects credentials or the login response is unusable"""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        details = kwargs.pop('details', None) or {}
        if status_code is not None:
            details['status_code'] = status_code
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code


class StateError(CoziServiceException):
    """Exception raised when an authenticated operation runs before login"""
    pass


class ConfigurationError(CoziServiceException):
    """Exception raised for missing or invalid Cozi configuration"""
    pass


class TransportError(CoziServiceException):
    """
    Exception raised when transient failures outlast the retry budget

    Exactly one of ``last_response`` / ``last_exception`` is set.
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        last_response: Optional[httpx.Response] = None,
        last_exception: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {'attempts': attempts}
        if last_response is not None:
            details['status_code'] = last_response.status_code
            details['url'] = str(last_response.request.url)
        if last_exception is not None:
            details['error_type'] = type(last_exception).__name__
        super().__init__(message, details=details, cause=last_exception)
        self.attempts = attempts
        self.last_response = last_response
        self.last_exception = last_exception


class ApiError(CoziServiceException):
    """Exception raised for a non-success status that is not retried"""

    def __init__(self, status_code: int, body: str, endpoint: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cozi API returned {status_code} for {endpoint}",
            details={'status_code': status_code, 'endpoint': endpoint, 'body': body},
        )
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint


class NotFoundError(ApiError):
    """Exception raised when a calendar item is missing under every API version tried"""

    def __init__(self, item_id: str, versions: Sequence[str], endpoint: str, body: str = ""):
        versions = tuple(versions)
        super().__init__(
            404,
            body,
            endpoint,
            message=(
                f"Calendar item '{item_id}' not found in API versions "
                f"{', '.join(versions)}"
            ),
        )
        self.item_id = item_id
        self.versions = versions
        self.details.update({'item_id': item_id, 'versions': list(versions)})


class ProtocolError(CoziServiceException):
    """Exception raised when a successful response carries no usable payload"""

    def __init__(self, message: str, endpoint: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, details={'endpoint': endpoint} if endpoint else None, cause=cause)
        self.endpoint = endpoint
