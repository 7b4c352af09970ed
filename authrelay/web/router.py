"""Web routes for Jinja2 templates."""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from authrelay.auth import get_optional_user
from authrelay.auth.models import UserRecord

web_router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@web_router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    user: Annotated[UserRecord | None, Depends(get_optional_user)],
) -> HTMLResponse:
    """Render the sign-in page with its GitHub button."""
    return templates.TemplateResponse(
        request,
        "login.html",
        {"user": user, "login_url": "/auth/github"},
    )
