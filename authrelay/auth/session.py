"""Server-side session storage for authenticated users.

The browser only carries an opaque session id inside Starlette's signed
session cookie; the user record itself lives in a ``SessionStore``.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

from authrelay.auth.models import UserRecord
from authrelay.constants import SESSION_MAX_AGE

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Storage backend holding one user record per session id."""

    async def get(self, session_id: str) -> UserRecord | None: ...

    async def set(self, session_id: str, record: UserRecord) -> None: ...

    async def clear(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local session store with a fixed time-to-live.

    The TTL runs from the moment a record is stored; reading it does not
    extend its life. Contents are lost on restart and not shared between
    processes.
    """

    def __init__(
        self,
        ttl_seconds: float = SESSION_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[UserRecord, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self._ttl

    async def get(self, session_id: str) -> UserRecord | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        record, stored_at = entry
        if self._expired(stored_at):
            del self._entries[session_id]
            logger.debug(f"Session {session_id[:8]}... expired")
            return None
        return record

    async def set(self, session_id: str, record: UserRecord) -> None:
        """Store ``record``, replacing whatever the session held before."""
        self._entries[session_id] = (record, self._clock())

    async def clear(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        expired = [sid for sid, (_, stored_at) in self._entries.items() if self._expired(stored_at)]
        for sid in expired:
            del self._entries[sid]
        return len(expired)
