"""HTTP API."""

from authrelay.api.router import api_router

__all__ = ["api_router"]
