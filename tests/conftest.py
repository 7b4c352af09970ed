"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from authrelay.auth.models import ProviderProfile
from authrelay.auth.session import InMemorySessionStore
from authrelay.config import Settings
from authrelay.main import create_app

FRONTEND_URL = "http://frontend.test"
BACKEND_URL = "http://backend.test"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "app_env": "test",
        "session_secret": "test-session-secret-with-enough-length",
        "backend_url": BACKEND_URL,
        "frontend_url": FRONTEND_URL,
        "github_client_id": "gh-client-id",
        "github_client_secret": "gh-client-secret",
        "google_client_id": "google-client-id",
        "google_client_secret": "google-client-secret",
        "rapidapi_key": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def make_settings():
    """Factory for settings with selected overrides."""
    return build_settings


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def app(settings: Settings, session_store: InMemorySessionStore) -> FastAPI:
    return create_app(settings, session_store=session_store)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client; cookies persist across its requests."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def github_profile_data() -> dict[str, Any]:
    return {
        "id": "42",
        "username": "alice",
        "displayName": "Alice A",
        "emails": [{"value": "a@x.com"}],
        "photos": [{"value": "http://img"}],
        "profileUrl": "http://gh/alice",
        "_json": {
            "bio": "hi",
            "location": "NY",
            "public_repos": 3,
            "followers": 1,
            "following": 2,
            "created_at": "2020-01-01",
        },
    }


@pytest.fixture
def google_profile_data() -> dict[str, Any]:
    return {
        "id": "1077",
        "displayName": "Bob",
        "emails": [{"value": "bob@example.com", "verified": True}],
        "photos": [{"value": "http://pic"}],
    }


@pytest.fixture
def github_profile(github_profile_data: dict[str, Any]) -> ProviderProfile:
    return ProviderProfile.model_validate(github_profile_data)


@pytest.fixture
def google_profile(google_profile_data: dict[str, Any]) -> ProviderProfile:
    return ProviderProfile.model_validate(google_profile_data)
