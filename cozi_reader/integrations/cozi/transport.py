"""
Cozi HTTP Transport

Executes requests against the Cozi REST API and retries transient failures
(network errors and 5xx responses) with exponential backoff.

Requests are passed in as zero-argument builders rather than as
``httpx.Request`` objects: every attempt sends a freshly built request, so
headers (the bearer token in particular) and bodies are never replayed from a
consumed request.
"""
from typing import Any, Callable, Dict, Optional

import httpx
from tenacity import RetryError

from ...utils.config import ConfigDefaults
from ...utils.logger import setup_logger
from ...utils.resilience import SleepFn, http_retrying
from .exceptions import TransportError

logger = setup_logger(__name__)

RequestBuilder = Callable[[], httpx.Request]


class CoziTransport:
    """
    Resilient HTTP execution for Cozi requests

    Owns no authentication state; callers put whatever headers they need on
    the requests their builders produce.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str = ConfigDefaults.BASE_URL,
        user_agent: str = ConfigDefaults.USER_AGENT,
        max_retries: int = ConfigDefaults.MAX_RETRIES,
        backoff_base: float = ConfigDefaults.BACKOFF_BASE,
        sleep: Optional[SleepFn] = None
    ):
        """
        Initialize the transport

        Args:
            http: httpx client used to send requests
            base_url: API root; endpoint paths are resolved against it
            user_agent: Client identification sent with every request
            max_retries: Retries after the first attempt
            backoff_base: Wait before retry n is backoff_base ** n seconds
            sleep: Awaitable sleep used between attempts (asyncio.sleep by default)
        """
        self._http = http
        self.base_url = httpx.URL(base_url.rstrip('/') + '/')
        self.user_agent = user_agent
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    def url(self, path: str) -> httpx.URL:
        """Resolve an endpoint path against the base URL"""
        return self.base_url.join(path.lstrip('/'))

    def build_request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None
    ) -> httpx.Request:
        """Build a new request carrying the client identification headers"""
        request_headers = {
            'User-Agent': self.user_agent,
            'Accept': 'application/json',
        }
        if headers:
            request_headers.update(headers)
        return self._http.build_request(method, self.url(path), headers=request_headers, json=json)

    async def send(self, build_request: RequestBuilder) -> httpx.Response:
        """
        Send a request, retrying transient failures

        Args:
            build_request: Called once per attempt to produce the request

        Returns:
            The first non-5xx response (which may still be a 4xx)

        Raises:
            TransportError: If every attempt failed with a network error or 5xx
        """
        retrying = http_retrying(
            max_retries=self.max_retries,
            backoff_base=self.backoff_base,
            sleep=self._sleep
        )

        try:
            return await retrying(self._send_once, build_request)
        except RetryError as e:
            last_attempt = e.last_attempt
            attempts = last_attempt.attempt_number
            if last_attempt.failed:
                cause = last_attempt.exception()
                logger.error(f"[COZI_TRANSPORT] Giving up after {attempts} attempts: {cause!r}")
                raise TransportError(
                    f"Cozi request failed after {attempts} attempts: {cause}",
                    attempts=attempts,
                    last_exception=cause
                ) from cause

            response = last_attempt.result()
            logger.error(
                f"[COZI_TRANSPORT] Giving up after {attempts} attempts: "
                f"HTTP {response.status_code} from {response.request.url.path}"
            )
            raise TransportError(
                f"Cozi request failed after {attempts} attempts: HTTP {response.status_code}",
                attempts=attempts,
                last_response=response
            ) from None

    async def _send_once(self, build_request: RequestBuilder) -> httpx.Response:
        request = build_request()
        logger.debug(f"[COZI_TRANSPORT] {request.method} {request.url.path}")
        response = await self._http.send(request)
        logger.debug(f"[COZI_TRANSPORT] {request.method} {request.url.path} -> {response.status_code}")
        return response
