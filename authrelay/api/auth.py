"""Authentication endpoints: provider login, callbacks, failure and session user."""

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from authrelay.auth import get_current_user
from authrelay.auth.dependencies import get_app_settings, get_providers, get_session_store
from authrelay.auth.models import Provider, UserRecord
from authrelay.auth.oauth import OAuthProvider
from authrelay.auth.redirect import build_error_redirect, build_success_redirect
from authrelay.auth.session import SessionStore
from authrelay.config import Settings
from authrelay.constants import SESSION_ID_KEY
from authrelay.exceptions import AuthRelayError
from authrelay.utils.logging import LogContext

router = APIRouter()
logger = logging.getLogger(__name__)

FAILURE_PATH = "/auth/failure"


# ============== OAuth Helpers ==============


def _begin_login(provider: OAuthProvider) -> RedirectResponse:
    """Send the browser to the provider's consent screen."""
    if not provider.configured:
        raise HTTPException(
            status_code=501,
            detail=f"{provider.name.capitalize()} OAuth not configured",
        )
    return RedirectResponse(url=provider.authorization_url(), status_code=302)


async def _complete_login(
    request: Request,
    provider: OAuthProvider,
    code: str | None,
    error: str | None,
    store: SessionStore,
    settings: Settings,
) -> RedirectResponse:
    """Finish the flow: exchange the code, attach the user, hand off to the front-end."""
    log = LogContext(logger, provider=provider.name)

    if error or not code:
        log.warning(f"Callback without authorization code (error={error!r})")
        return RedirectResponse(url=FAILURE_PATH, status_code=302)

    try:
        user = await provider.authenticate(code)

        # A new login replaces whatever this session held
        session_id = request.session.get(SESSION_ID_KEY) or secrets.token_urlsafe(32)
        await store.set(session_id, user)
    except AuthRelayError as e:
        log.error(f"Login failed ({type(e).__name__}): {e}")
        return RedirectResponse(url=FAILURE_PATH, status_code=302)

    request.session[SESSION_ID_KEY] = session_id
    log.info(f"User {user.login} logged in")
    return RedirectResponse(
        url=build_success_redirect(settings.frontend_url, user),
        status_code=302,
    )


# ============== GitHub OAuth ==============


@router.get("/github")
async def github_login(
    providers: Annotated[dict[str, OAuthProvider], Depends(get_providers)],
) -> RedirectResponse:
    """Initiate GitHub OAuth login."""
    return _begin_login(providers[Provider.GITHUB.value])


@router.get("/github/callback")
async def github_callback(
    request: Request,
    providers: Annotated[dict[str, OAuthProvider], Depends(get_providers)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    code: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Handle GitHub OAuth callback."""
    return await _complete_login(
        request, providers[Provider.GITHUB.value], code, error, store, settings
    )


# ============== Google OAuth ==============


@router.get("/google")
async def google_login(
    providers: Annotated[dict[str, OAuthProvider], Depends(get_providers)],
) -> RedirectResponse:
    """Initiate Google OAuth login."""
    return _begin_login(providers[Provider.GOOGLE.value])


@router.get("/google/callback")
async def google_callback(
    request: Request,
    providers: Annotated[dict[str, OAuthProvider], Depends(get_providers)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    code: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Handle Google OAuth callback."""
    return await _complete_login(
        request, providers[Provider.GOOGLE.value], code, error, store, settings
    )


# ============== Common ==============


@router.get("/failure")
async def auth_failure(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RedirectResponse:
    """Send a failed login back to the front-end with the error flag."""
    return RedirectResponse(url=build_error_redirect(settings.frontend_url), status_code=302)


@router.get("/user")
async def get_session_user(user: Annotated[UserRecord, Depends(get_current_user)]) -> dict:
    """Get current authenticated user."""
    return user.to_payload()
