"""
Pytest configuration and fixtures

The Cozi API is simulated with ``httpx.MockTransport``: tests register canned
responses per (method, path) and inspect the recorded requests afterwards.
"""
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import httpx
import pytest

from cozi_reader.integrations.cozi import CoziClient

API_ROOT = "/api/ext/"
ACCOUNT_ID = "acct-1"
USERNAME = "parent@example.com"
PASSWORD = "s3cret"


def api_path(path: str) -> str:
    """Absolute request path for an endpoint path such as ``2004/acct-1/list/``"""
    return API_ROOT + path


def login_payload(token: str = "tok-1", expires_in: int = 3600, account_id: str = ACCOUNT_ID) -> Dict[str, Any]:
    return {
        "accessToken": token,
        "expiresIn": expires_in,
        "accountId": account_id,
        "refreshToken": "refresh-unused",
    }


def calendar_item(item_id: str, day: str, description: str = "", **fields: Any) -> Dict[str, Any]:
    """Calendar item as it appears in a month document"""
    item = {
        "id": item_id,
        "itemType": "appointment",
        "itemVersion": 1,
        "description": description or f"Item {item_id}",
        "day": day,
        "startTime": "09:00:00",
        "endTime": "10:00:00",
        "dateSpan": 0,
        "itemSource": None,
        "itemDetails": {"location": None, "notes": None, "readOnly": False},
    }
    item.update(fields)
    return item


def month_payload(
    year: int,
    month: int,
    days: Dict[str, List[str]],
    items: Iterable[Dict[str, Any]]
) -> Dict[str, Any]:
    """Month document: day -> item references plus the item map"""
    return {
        "startDate": f"{year:04d}-{month:02d}-01T00:00:00",
        "endDate": f"{year:04d}-{month:02d}-28T00:00:00",
        "days": {day: [{"id": item_id} for item_id in refs] for day, refs in days.items()},
        "items": {item["id"]: item for item in items},
    }


def empty_month(year: int, month: int) -> Dict[str, Any]:
    return month_payload(year, month, {}, [])


PEOPLE = [
    {"accountPersonId": "p-1", "name": "Alex", "email": "alex@example.com", "type": "adult"},
    {"accountPersonId": "p-2", "name": "Sam", "type": "adult"},
    {"accountPersonId": "p-3", "name": "Robin", "type": "child"},
]


# ============================================
# FAKE COZI API
# ============================================

class FakeCozi:
    """
    Canned-response HTTP handler

    Each route holds a queue of canned responses, consumed in order;
    the last one is repeated once the queue is down to it. An entry is a
    ``(status, body)`` tuple (dict/list bodies are sent as JSON, strings as
    text) or an ``httpx.TransportError`` subclass to raise.
    """

    def __init__(self):
        self.routes: Dict[tuple, list] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method, api_path(path))] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text="no such route")

        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(canned, type) and issubclass(canned, httpx.TransportError):
            raise canned("simulated network failure", request=request)

        status, body = canned
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body).encode(),
                                  headers={"Content-Type": "application/json"})
        return httpx.Response(status, text=body or "")

    def requests_to(self, path: str, method: str = "GET") -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == api_path(path)]

    @property
    def login_requests(self) -> List[httpx.Request]:
        return self.requests_to("2207/auth/login", method="POST")

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay"""

    def __init__(self):
        self.delays: List[float] = []

    async def sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ============================================
# FIXTURES
# ============================================

@pytest.fixture
def fake_cozi():
    """Fake API with a working login endpoint"""
    fake = FakeCozi()
    fake.add("POST", "2207/auth/login", (200, login_payload()))
    return fake


@pytest.fixture
def recorder():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_client(fake_cozi, recorder, clock):
    """Factory for clients wired to the fake API, fake sleep and fake clock"""
    def _make(**kwargs) -> CoziClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_cozi.handler))
        return CoziClient(http, sleep=recorder.sleep, clock=clock, **kwargs)
    return _make
