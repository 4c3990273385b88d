"""
Tests for Cozi session management

Covers the login exchange, token expiry with its safety margin and lazy
re-authentication.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from cozi_reader.integrations.cozi import AuthError, AuthToken, Credentials, StateError

from conftest import ACCOUNT_ID, PASSWORD, USERNAME, login_payload


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================
# TOKEN EXPIRY
# ============================================

class TestAuthToken:
    """Test token expiry with the 60 second safety margin"""

    def test_issued_sets_absolute_expiry(self):
        """Test expires_at is now + expires_in"""
        token = AuthToken.issued("abc", 3600, now=NOW)
        assert token.expires_at == NOW + timedelta(hours=1)

    def test_token_inside_margin_is_expired(self):
        """Test a token expiring in under a minute counts as expired"""
        token = AuthToken.issued("abc", 59, now=NOW)
        assert token.is_expired_at(NOW) is True

    def test_token_at_margin_boundary_is_expired(self):
        """Test exactly 60 seconds left is already expired"""
        token = AuthToken.issued("abc", 60, now=NOW)
        assert token.is_expired_at(NOW) is True

    def test_token_outside_margin_is_valid(self):
        """Test a token with more than a minute left is usable"""
        token = AuthToken.issued("abc", 61, now=NOW)
        assert token.is_expired_at(NOW) is False

    def test_secrets_not_in_repr(self):
        """Test token value and password stay out of repr"""
        assert "abc" not in repr(AuthToken.issued("abc", 60, now=NOW))
        assert PASSWORD not in repr(Credentials(USERNAME, PASSWORD))


# ============================================
# LOGIN
# ============================================

class TestLogin:
    """Test the credential exchange"""

    @pytest.mark.asyncio
    async def test_login_establishes_session(self, make_client, fake_cozi):
        """Test login stores the token and account id"""
        client = make_client()
        await client.login(USERNAME, PASSWORD)

        assert client.is_authenticated
        assert client.session.account_id == ACCOUNT_ID
        assert client.session.token.value == "tok-1"
        assert len(fake_cozi.login_requests) == 1

    @pytest.mark.asyncio
    async def test_login_request_shape(self, make_client, fake_cozi):
        """Test login posts credentials to the 2207 auth endpoint"""
        client = make_client()
        await client.login(USERNAME, PASSWORD)

        request = fake_cozi.login_requests[0]
        assert str(request.url) == "https://rest.cozi.com/api/ext/2207/auth/login"
        assert json.loads(request.content) == {
            "username": USERNAME,
            "password": PASSWORD,
            "issueRefresh": True,
        }
        assert request.headers["User-Agent"].startswith("cozi-reader/")
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_token_expiry_uses_clock(self, make_client, clock):
        """Test expires_at is computed from the injected clock"""
        client = make_client()
        await client.login(USERNAME, PASSWORD)

        assert client.session.token.expires_at == clock.now + timedelta(seconds=3600)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username,password", [("", PASSWORD), (USERNAME, "")])
    async def test_empty_credentials_rejected_without_request(self, make_client, fake_cozi, username, password):
        """Test empty username or password fails before any I/O"""
        client = make_client()
        with pytest.raises(ValueError):
            await client.login(username, password)
        assert fake_cozi.requests == []

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, make_client, fake_cozi):
        """Test a 401 from the login endpoint raises AuthError with the status"""
        fake_cozi.add("POST", "2207/auth/login", (401, {"message": "Invalid credentials"}))
        client = make_client()

        with pytest.raises(AuthError) as exc_info:
            await client.login(USERNAME, "wrong")

        assert exc_info.value.status_code == 401
        assert not client.is_authenticated

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        "",
        "null",
        {"expiresIn": 3600, "accountId": ACCOUNT_ID},
        {"accessToken": "tok", "expiresIn": 3600},
        {"accessToken": "tok", "accountId": ACCOUNT_ID},
        {"accessToken": "tok", "expiresIn": "soon", "accountId": ACCOUNT_ID},
    ])
    async def test_unusable_login_response(self, make_client, fake_cozi, body):
        """Test a success status without token, expiry or account id is an AuthError"""
        fake_cozi.add("POST", "2207/auth/login", (200, body))
        client = make_client()

        with pytest.raises(AuthError, match="empty auth response"):
            await client.login(USERNAME, PASSWORD)

    @pytest.mark.asyncio
    async def test_failed_relogin_clears_previous_session(self, make_client, fake_cozi):
        """Test a second, failing login leaves the client unauthenticated"""
        fake_cozi.add("POST", "2207/auth/login", (200, login_payload()), (401, ""))
        client = make_client()
        await client.login(USERNAME, PASSWORD)

        with pytest.raises(AuthError):
            await client.login(USERNAME, "wrong")

        assert not client.is_authenticated
        with pytest.raises(StateError):
            await client.session.ensure_valid()


# ============================================
# LAZY RE-AUTHENTICATION
# ============================================

class TestEnsureValid:
    """Test token validation before authenticated calls"""

    @pytest.mark.asyncio
    async def test_fresh_token_needs_no_request(self, make_client, fake_cozi):
        """Test ensure_valid right after login performs no network call"""
        client = make_client()
        await client.login(USERNAME, PASSWORD)
        requests_after_login = len(fake_cozi.requests)

        await client.session.ensure_valid()

        assert len(fake_cozi.requests) == requests_after_login

    @pytest.mark.asyncio
    async def test_token_near_expiry_triggers_reauthentication(self, make_client, fake_cozi, clock):
        """Test a token within the margin is replaced by a new exchange"""
        fake_cozi.add("POST", "2207/auth/login", (200, login_payload("tok-1")), (200, login_payload("tok-2")))
        client = make_client()
        await client.login(USERNAME, PASSWORD)

        clock.advance(seconds=3600 - 30)
        await client.session.ensure_valid()

        assert len(fake_cozi.login_requests) == 2
        assert client.session.token.value == "tok-2"

    @pytest.mark.asyncio
    async def test_before_login_raises_state_error(self, make_client, fake_cozi):
        """Test ensure_valid without a session fails without I/O"""
        client = make_client()

        with pytest.raises(StateError):
            await client.session.ensure_valid()
        assert fake_cozi.requests == []

    def test_auth_headers_before_login(self, make_client):
        """Test no Authorization header can be produced without a token"""
        client = make_client()
        with pytest.raises(StateError):
            client.session.auth_headers()
