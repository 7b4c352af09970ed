"""Session user, logout and diagnostics endpoints under /api."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from authrelay.auth import get_current_user
from authrelay.auth.dependencies import get_app_settings, get_session_store
from authrelay.auth.models import UserRecord
from authrelay.auth.session import SessionStore
from authrelay.config import Settings
from authrelay.constants import REPORTED_ENV_VARS, SESSION_ID_KEY
from authrelay.exceptions import SessionError

router = APIRouter()
logger = logging.getLogger(__name__)


def config_presence(settings: Settings) -> dict[str, str]:
    """Report which credentials are configured, without their values."""
    presence = {}
    for var in REPORTED_ENV_VARS:
        presence[var] = "Set" if getattr(settings, var.lower()) else "Not set"
    return presence


@router.get("/user")
async def get_user(user: Annotated[UserRecord, Depends(get_current_user)]) -> dict:
    """Get current authenticated user."""
    return user.to_payload()


@router.post("/logout", response_model=None)
async def logout(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> dict | JSONResponse:
    """Log out the current user."""
    session_id = request.session.get(SESSION_ID_KEY)
    try:
        if session_id:
            await store.clear(session_id)
    except SessionError as e:
        logger.error(f"Logout failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Logout failed"})

    request.session.clear()
    return {"message": "Logged out successfully"}


@router.get("/test")
async def config_check(settings: Annotated[Settings, Depends(get_app_settings)]) -> dict:
    """Diagnostic echo of which settings are present."""
    return {
        "message": "API is working",
        "config": config_presence(settings),
    }
