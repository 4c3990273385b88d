"""
Cozi Session Management

Holds the username/password for the life of the process, acquires bearer
tokens with a full credential exchange and re-acquires them when they are
about to expire. No refresh-token flow is used and nothing is persisted.

The current token is an immutable value that is replaced wholesale on every
authentication, so readers can snapshot it without locking. Concurrent
refreshes may each perform an exchange; the last one wins.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import httpx

from ...utils.config import ConfigDefaults
from ...utils.logger import setup_logger
from . import endpoints
from .exceptions import AuthError, StateError
from .transport import CoziTransport

logger = setup_logger(__name__)

Clock = Callable[[], datetime]

EXPIRY_MARGIN = timedelta(seconds=ConfigDefaults.TOKEN_EXPIRY_MARGIN_SECONDS)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthToken:
    """Bearer credential with an absolute expiry"""
    value: str = field(repr=False)
    expires_at: datetime

    @classmethod
    def issued(cls, value: str, expires_in: int, now: Optional[datetime] = None) -> 'AuthToken':
        """Build a token that expires ``expires_in`` seconds after ``now``"""
        now = now or utc_now()
        return cls(value=value, expires_at=now + timedelta(seconds=expires_in))

    def is_expired_at(self, now: datetime) -> bool:
        """Expired once ``now`` is within the safety margin of the expiry"""
        return now >= self.expires_at - EXPIRY_MARGIN

    @property
    def is_expired(self) -> bool:
        """Expiry against the wall clock; sessions use ``is_expired_at`` with their own clock"""
        return self.is_expired_at(utc_now())


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


class CoziSession:
    """
    Authentication lifecycle for one Cozi account

    Lifecycle:
        created empty -> login() populates token and account id ->
        ensure_valid() re-authenticates when the token expires ->
        authenticate() forces a new exchange (used after a 401)
    """

    def __init__(self, transport: CoziTransport, clock: Optional[Clock] = None):
        self._transport = transport
        self._clock = clock or utc_now
        self._credentials: Optional[Credentials] = None
        self._token: Optional[AuthToken] = None
        self._account_id: Optional[str] = None

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    @property
    def account_id(self) -> str:
        """Account identifier of the established session"""
        if self._account_id is None:
            raise StateError("not authenticated")
        return self._account_id

    @property
    def is_authenticated(self) -> bool:
        return self._account_id is not None and self._token is not None

    def token_expired(self) -> bool:
        return self._token is None or self._token.is_expired_at(self._clock())

    async def login(self, username: str, password: str) -> None:
        """
        Store credentials and perform one authentication exchange

        Raises:
            ValueError: If username or password is empty
            AuthError: If Cozi rejects the credentials or the response is unusable
            TransportError: If the login endpoint stays unreachable
        """
        if not username or not password:
            raise ValueError("username and password are required")

        self._credentials = Credentials(username=username, password=password)
        self._token = None
        self._account_id = None
        await self.authenticate()

    async def ensure_valid(self) -> None:
        """
        Make sure a usable token is held before an authenticated call

        Fails fast, without network I/O, when no session was ever established.
        """
        if self._credentials is None or self._account_id is None:
            raise StateError("not authenticated")

        if self.token_expired():
            logger.info("[COZI_AUTH] Token expired or missing, re-authenticating")
            await self.authenticate()

    async def authenticate(self) -> None:
        """Perform a full username/password exchange and replace the token"""
        if self._credentials is None:
            raise StateError("not authenticated")

        credentials = self._credentials
        payload = {
            'username': credentials.username,
            'password': credentials.password,
            'issueRefresh': True,
        }

        def build() -> httpx.Request:
            return self._transport.build_request('POST', endpoints.login(), json=payload)

        response = await self._transport.send(build)

        if not response.is_success:
            logger.warning(f"[COZI_AUTH] Login rejected with HTTP {response.status_code}")
            raise AuthError(
                f"Cozi login failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        token, account_id = self._parse_auth_response(response)
        self._token = token
        self._account_id = account_id
        logger.info(f"[COZI_AUTH] Authenticated, token valid until {token.expires_at.isoformat()}")

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for the current token"""
        token = self._token
        if token is None:
            raise StateError("not authenticated")
        return {'Authorization': f"Bearer {token.value}"}

    def _parse_auth_response(self, response: httpx.Response):
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AuthError("empty auth response", status_code=response.status_code, cause=e) from e

        if not isinstance(body, dict):
            raise AuthError("empty auth response", status_code=response.status_code)

        access_token = body.get('accessToken')
        expires_in = body.get('expiresIn')
        account_id = body.get('accountId')
        if not access_token or not account_id or expires_in is None:
            raise AuthError("empty auth response", status_code=response.status_code)

        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError) as e:
            raise AuthError("empty auth response", status_code=response.status_code, cause=e) from e

        return AuthToken.issued(str(access_token), expires_in, now=self._clock()), str(account_id)
