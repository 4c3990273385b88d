"""
Cozi API Client

Read-only async client for the Cozi Family Organizer REST API (lists,
calendar, people).

Every call goes through the same pipeline:
    1. make sure the session holds a valid token (lazy re-authentication)
    2. send through the retrying transport
    3. on 401, force one re-authentication and resend once
    4. raise ApiError for any other non-success status
    5. parse the JSON body into the pydantic model

Single calendar item lookups additionally walk an ordered list of API
versions, moving to the next version on 404.

Architecture:
    CoziCalendarService → CoziClient → CoziSession / CoziTransport → Cozi REST API
"""
from typing import Any, Callable, List, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from ...utils.config import ConfigDefaults, CoziConfig
from ...utils.logger import setup_logger
from ...utils.resilience import SleepFn
from . import endpoints
from .auth import Clock, CoziSession
from .exceptions import ApiError, AuthError, NotFoundError, ProtocolError, TransportError
from .models import CalendarItem, CalendarMonth, ListRecord, Person
from .transport import CoziTransport, RequestBuilder

logger = setup_logger(__name__)

PathFor = Callable[[str], str]

_LISTS = TypeAdapter(List[ListRecord])
_LIST = TypeAdapter(ListRecord)
_MONTH = TypeAdapter(CalendarMonth)
_PEOPLE = TypeAdapter(List[Person])
_ITEM = TypeAdapter(CalendarItem)


class CoziClient:
    """
    Cozi REST API client

    Usage:
        async with CoziClient() as client:
            await client.login(username, password)
            lists = await client.get_lists()
    """

    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        config: Optional[CoziConfig] = None,
        *,
        item_api_versions: Sequence[str] = ConfigDefaults.ITEM_API_VERSIONS,
        sleep: Optional[SleepFn] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize Cozi client

        Args:
            http: httpx client to use; one is created (and later closed) if omitted
            config: Base URL, timeouts and retry settings
            item_api_versions: API versions tried in order for item lookups
            sleep: Awaitable sleep used for retry backoff (asyncio.sleep by default)
            clock: Returns the current UTC time; used for token expiry
        """
        self.config = config or CoziConfig()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self.item_api_versions = tuple(item_api_versions)
        if not self.item_api_versions:
            raise ValueError("at least one item API version is required")

        self.transport = CoziTransport(
            self._http,
            base_url=self.config.base_url,
            user_agent=self.config.user_agent,
            max_retries=self.config.max_retries,
            backoff_base=self.config.backoff_base,
            sleep=sleep
        )
        self.session = CoziSession(self.transport, clock=clock)

    @classmethod
    def from_config(cls, config: CoziConfig, **kwargs: Any) -> 'CoziClient':
        """Create a client from configuration (credentials are used by login)"""
        return cls(config=config, **kwargs)

    async def __aenter__(self) -> 'CoziClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this client created it"""
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    # ===================================================================
    # AUTHENTICATION
    # ===================================================================

    async def login(self, username: str, password: str) -> None:
        """Authenticate with Cozi; required before any other call"""
        await self.session.login(username, password)

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    # ===================================================================
    # LISTS
    # ===================================================================

    async def get_lists(self) -> List[ListRecord]:
        """All shopping and to-do lists"""
        lists = await self._get_model(endpoints.lists, _LISTS)
        logger.debug(f"[COZI] Retrieved {len(lists)} lists")
        return lists

    async def get_list(self, list_id: str) -> ListRecord:
        """A single list by id"""
        return await self._get_model(lambda account_id: endpoints.list_by_id(account_id, list_id), _LIST)

    # ===================================================================
    # CALENDAR
    # ===================================================================

    async def get_calendar_month(self, year: int, month: int) -> CalendarMonth:
        """
        One month of calendar data in Cozi's day/item form

        Raises:
            ValueError: If month is not in 1..12 (before any request is made)
        """
        _validate_month(month)
        return await self._get_model(
            lambda account_id: endpoints.calendar_month(account_id, year, month),
            _MONTH
        )

    async def get_calendar_month_raw(self, year: int, month: int) -> str:
        """The month document as returned by Cozi, unparsed"""
        _validate_month(month)
        response = await self._get(lambda account_id: endpoints.calendar_month(account_id, year, month))
        _raise_for_status(response)
        return _require_text(response)

    async def get_calendar_item(self, item_id: str) -> CalendarItem:
        """
        Full record for one calendar item

        Tries each API version in ``item_api_versions`` until one does not
        answer 404.

        Raises:
            NotFoundError: If every version answered 404
        """
        response = await self._get_item_response(item_id)
        return _parse(response, _ITEM)

    async def get_calendar_item_raw(self, item_id: str) -> str:
        """The item document as returned by Cozi, unparsed"""
        response = await self._get_item_response(item_id)
        return _require_text(response)

    # ===================================================================
    # PEOPLE
    # ===================================================================

    async def get_people(self) -> List[Person]:
        """Household members on the account"""
        people = await self._get_model(endpoints.people, _PEOPLE)
        logger.debug(f"[COZI] Retrieved {len(people)} people")
        return people

    # ===================================================================
    # REQUEST PIPELINE
    # ===================================================================

    def _get_builder(self, path_for: PathFor) -> RequestBuilder:
        """Builder producing a fresh authenticated GET from the current session state"""
        def build() -> httpx.Request:
            return self.transport.build_request(
                'GET',
                path_for(self.session.account_id),
                headers=self.session.auth_headers()
            )
        return build

    async def _get(self, path_for: PathFor) -> httpx.Response:
        """Steps 1-3 of the pipeline: valid token, retrying send, one re-auth on 401"""
        await self.session.ensure_valid()

        build = self._get_builder(path_for)
        response = await self.transport.send(build)

        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.info(f"[COZI] 401 from {response.request.url.path}, re-authenticating and retrying once")
            await self.session.authenticate()
            response = await self.transport.send(build)

        return response

    async def _get_model(self, path_for: PathFor, adapter: TypeAdapter) -> Any:
        response = await self._get(path_for)
        _raise_for_status(response)
        return _parse(response, adapter)

    async def _get_item_response(self, item_id: str) -> httpx.Response:
        response = None
        for version in self.item_api_versions:
            response = await self._get(
                lambda account_id, version=version: endpoints.calendar_item(account_id, item_id, version)
            )
            if response.status_code == httpx.codes.NOT_FOUND:
                logger.info(f"[COZI] Calendar item {item_id} not found under API {version}")
                continue
            _raise_for_status(response)
            return response

        raise NotFoundError(
            item_id,
            self.item_api_versions,
            endpoint=response.request.url.path,
            body=response.text
        )


# ===================================================================
# RESPONSE HELPERS
# ===================================================================

def _validate_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_success:
        endpoint = response.request.url.path
        logger.warning(f"[COZI] HTTP {response.status_code} from {endpoint}")
        raise ApiError(response.status_code, response.text, endpoint)


def _require_text(response: httpx.Response) -> str:
    text = response.text
    if not text.strip() or text.strip() == "null":
        raise ProtocolError("unexpected empty content", endpoint=response.request.url.path)
    return text


def _parse(response: httpx.Response, adapter: TypeAdapter) -> Any:
    """Parse a successful response body; empty, null or malformed bodies are protocol errors"""
    endpoint = response.request.url.path
    content = response.content.strip()
    if not content or content == b'null':
        raise ProtocolError("unexpected empty content", endpoint=endpoint)

    try:
        return adapter.validate_json(content)
    except ValidationError as e:
        raise ProtocolError(
            f"unexpected content from {endpoint}: {e.error_count()} validation errors",
            endpoint=endpoint,
            cause=e
        ) from e


async def try_login(client: CoziClient, username: str, password: str) -> bool:
    """
    Attempt a login, reporting failure as False instead of raising

    Only Cozi-side failures (rejected credentials, unreachable service,
    unexpected status) are reported as False.
    """
    try:
        await client.login(username, password)
        return True
    except (AuthError, TransportError, ApiError) as e:
        logger.warning(f"[COZI] Login failed: {e}")
        return False
