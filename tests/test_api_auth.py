"""Tests for authentication API endpoints."""

import json
from typing import Any
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from authrelay.auth.models import ProviderProfile
from authrelay.auth.session import InMemorySessionStore
from authrelay.exceptions import ProviderExchangeError, SessionError
from authrelay.main import create_app

FRONTEND_URL = "http://frontend.test"


def stub_profile(app: FastAPI, provider: str, profile: ProviderProfile, token: str = "tok") -> AsyncMock:
    """Replace the provider's network exchange with a canned profile."""
    fetch = AsyncMock(return_value=(profile, token))
    app.state.providers[provider].fetch_profile = fetch
    return fetch


def user_from_location(location: str) -> dict[str, Any]:
    parts = urlsplit(location)
    assert f"{parts.scheme}://{parts.netloc}" == FRONTEND_URL
    query = parse_qs(parts.query)
    assert query["auth"] == ["success"]
    return json.loads(query["user"][0])


class TestLoginRedirects:
    """Tests for /auth/<provider>."""

    @pytest.mark.asyncio
    async def test_github_login_redirect(self, client: AsyncClient):
        """Test GitHub login initiates OAuth flow with its scopes."""
        response = await client.get("/auth/github")

        assert response.status_code == 302
        location = urlsplit(response.headers["location"])
        assert location.netloc == "github.com"
        assert set(parse_qs(location.query)["scope"][0].split()) == {"user:email", "read:user"}

    @pytest.mark.asyncio
    async def test_google_login_redirect(self, client: AsyncClient):
        """Test Google login initiates OAuth flow with its scopes."""
        response = await client.get("/auth/google")

        assert response.status_code == 302
        location = urlsplit(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        assert set(parse_qs(location.query)["scope"][0].split()) == {"profile", "email"}

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self, make_settings, session_store):
        """Test a provider without credentials answers 501."""
        app = create_app(make_settings(google_client_id=""), session_store=session_store)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/auth/google")

        assert response.status_code == 501
        assert response.json()["detail"] == "Google OAuth not configured"


class TestCallbacks:
    """Tests for /auth/<provider>/callback."""

    @pytest.mark.asyncio
    async def test_github_callback_success(
        self, app: FastAPI, client: AsyncClient, github_profile: ProviderProfile
    ):
        """Test a GitHub login lands on the front-end with the user."""
        fetch = stub_profile(app, "github", github_profile, "gho_token")

        response = await client.get("/auth/github/callback", params={"code": "abc"})

        fetch.assert_awaited_once_with("abc")
        assert response.status_code == 302
        user = user_from_location(response.headers["location"])
        assert user["provider"] == "github"
        assert user["login"] == "alice"
        assert user["email"] == "a@x.com"
        assert user["accessToken"] == "gho_token"

    @pytest.mark.asyncio
    async def test_google_callback_success(
        self, app: FastAPI, client: AsyncClient, google_profile: ProviderProfile
    ):
        """Test a Google login derives login from the email."""
        stub_profile(app, "google", google_profile)

        response = await client.get("/auth/google/callback", params={"code": "abc"})

        user = user_from_location(response.headers["location"])
        assert user["provider"] == "google"
        assert user["login"] == "bob"
        assert user["verified_email"] is True

    @pytest.mark.asyncio
    async def test_google_without_email_fails(
        self, app: FastAPI, client: AsyncClient, google_profile: ProviderProfile
    ):
        """Test a Google profile with no emails routes to /auth/failure."""
        stub_profile(app, "google", google_profile.model_copy(update={"emails": []}))

        response = await client.get("/auth/google/callback", params={"code": "abc"})

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/failure"
        assert (await client.get("/auth/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_github_profile_fails(self, app: FastAPI, client: AsyncClient):
        """Test a profile with wrongly typed fields routes to /auth/failure."""
        profile = ProviderProfile.model_validate(
            {"id": "1", "username": "alice", "_json": {"public_repos": "many"}}
        )
        stub_profile(app, "github", profile)

        response = await client.get("/auth/github/callback", params={"code": "abc"})

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/failure"
        assert (await client.get("/auth/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_exchange_failure(self, app: FastAPI, client: AsyncClient):
        """Test a provider outage routes to /auth/failure."""
        app.state.providers["github"].fetch_profile = AsyncMock(
            side_effect=ProviderExchangeError("github", "HTTP error: timeout")
        )

        response = await client.get("/auth/github/callback", params={"code": "abc"})

        assert response.status_code == 302
        assert response.headers["location"] == "/auth/failure"

    @pytest.mark.asyncio
    async def test_callback_without_code(self, client: AsyncClient):
        """Test callback without authorization code."""
        response = await client.get("/auth/github/callback")
        assert response.status_code == 302
        assert response.headers["location"] == "/auth/failure"

    @pytest.mark.asyncio
    async def test_callback_with_provider_error(self, client: AsyncClient):
        """Test a denied consent screen."""
        response = await client.get("/auth/google/callback", params={"error": "access_denied"})
        assert response.headers["location"] == "/auth/failure"

    @pytest.mark.asyncio
    async def test_failure_redirects_to_frontend(self, client: AsyncClient):
        response = await client.get("/auth/failure")
        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL}/?auth=error"


class TestSessionUser:
    """Tests for /auth/user, /api/user and /api/logout."""

    @pytest.mark.asyncio
    async def test_user_unauthenticated(self, client: AsyncClient):
        """Test both user endpoints refuse anonymous requests."""
        for path in ("/auth/user", "/api/user"):
            response = await client.get(path)
            assert response.status_code == 401
            assert response.json() == {"detail": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_user_after_login(
        self, app: FastAPI, client: AsyncClient, github_profile: ProviderProfile
    ):
        """Test the stored record is returned after login."""
        stub_profile(app, "github", github_profile)
        login = await client.get("/auth/github/callback", params={"code": "abc"})
        redirected = user_from_location(login.headers["location"])

        for path in ("/auth/user", "/api/user"):
            response = await client.get(path)
            assert response.status_code == 200
            assert response.json() == redirected

    @pytest.mark.asyncio
    async def test_new_login_overwrites(
        self,
        app: FastAPI,
        client: AsyncClient,
        github_profile: ProviderProfile,
        google_profile: ProviderProfile,
        session_store: InMemorySessionStore,
    ):
        """Test a second login replaces the first in the same session."""
        stub_profile(app, "github", github_profile)
        stub_profile(app, "google", google_profile)

        await client.get("/auth/github/callback", params={"code": "abc"})
        await client.get("/auth/google/callback", params={"code": "def"})

        response = await client.get("/auth/user")
        assert response.json()["provider"] == "google"
        assert len(session_store) == 1

    @pytest.mark.asyncio
    async def test_logout(self, app: FastAPI, client: AsyncClient, github_profile: ProviderProfile):
        """Test logout ends the session."""
        stub_profile(app, "github", github_profile)
        await client.get("/auth/github/callback", params={"code": "abc"})

        response = await client.post("/api/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

        assert (await client.get("/auth/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_logout_unauthenticated(self, client: AsyncClient):
        """Test logout when not authenticated still succeeds."""
        response = await client.post("/api/logout")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_session_expires(
        self, app: FastAPI, client: AsyncClient, github_profile: ProviderProfile, clock
    ):
        """Test the record disappears once the TTL elapses."""
        stub_profile(app, "github", github_profile)
        await client.get("/auth/github/callback", params={"code": "abc"})
        assert (await client.get("/auth/user")).status_code == 200

        clock.advance(3600)

        assert (await client.get("/auth/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_logout_store_failure(
        self, make_settings, github_profile: ProviderProfile
    ):
        """Test a failing session teardown reports an error status."""

        class BrokenStore(InMemorySessionStore):
            async def clear(self, session_id: str) -> None:
                raise SessionError("backend unavailable")

        app = create_app(make_settings(), session_store=BrokenStore())
        stub_profile(app, "github", github_profile)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            await ac.get("/auth/github/callback", params={"code": "abc"})
            response = await ac.post("/api/logout")

        assert response.status_code == 500
        assert response.json() == {"error": "Logout failed"}
