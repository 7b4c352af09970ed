"""Authentication module."""

from authrelay.auth.dependencies import get_current_user, get_optional_user
from authrelay.auth.models import Provider, UserRecord
from authrelay.auth.oauth import build_providers
from authrelay.auth.session import InMemorySessionStore, SessionStore

__all__ = [
    "InMemorySessionStore",
    "Provider",
    "SessionStore",
    "UserRecord",
    "build_providers",
    "get_current_user",
    "get_optional_user",
]
