"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request

from authrelay.auth.models import UserRecord
from authrelay.auth.oauth import OAuthProvider
from authrelay.auth.session import SessionStore
from authrelay.config import Settings
from authrelay.constants import SESSION_ID_KEY
from authrelay.exceptions import NotAuthenticatedError


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_providers(request: Request) -> dict[str, OAuthProvider]:
    return request.app.state.providers


async def get_optional_user(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> UserRecord | None:
    """Get current user from session if logged in."""
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        return None

    user = await store.get(session_id)

    # Session id in cookie but record expired or gone, clear stale session
    if user is None:
        request.session.clear()

    return user


async def get_current_user(
    user: Annotated[UserRecord | None, Depends(get_optional_user)],
) -> UserRecord:
    """Get current user, raising NotAuthenticatedError if not logged in."""
    if user is None:
        raise NotAuthenticatedError("Not authenticated")
    return user
