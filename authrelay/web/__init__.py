"""Server-rendered pages."""

from authrelay.web.router import web_router

__all__ = ["web_router"]
