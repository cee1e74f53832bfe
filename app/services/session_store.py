"""Server-side session records keyed by an opaque cookie value."""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Protocol

from app.config import settings
from app.utils.clock import utc_now


@dataclass(frozen=True)
class SessionRecord:
    user_id: str
    created_at: datetime


class SessionStore(Protocol):
    """Persistence interface for login sessions."""

    def get(self, session_id: str) -> SessionRecord | None:
        """Return the live session, or None if absent or expired."""

    def put(self, session_id: str, record: SessionRecord) -> None:
        """Store or replace a session."""

    def delete(self, session_id: str) -> None:
        """Remove a session; unknown ids are ignored."""

    def purge_expired(self) -> int:
        """Drop every expired session and return how many were removed."""


class InMemorySessionStore:
    """Process-local store with an absolute expiry measured from creation."""

    def __init__(self, max_age: timedelta, clock: Callable[[], datetime] = utc_now):
        self.max_age = max_age
        self._clock = clock
        self._sessions: dict[str, SessionRecord] = {}

    def _is_expired(self, record: SessionRecord) -> bool:
        return record.created_at < self._clock() - self.max_age

    def get(self, session_id: str) -> SessionRecord | None:
        record = self._sessions.get(session_id)
        if record is None:
            return None
        if self._is_expired(record):
            self._sessions.pop(session_id, None)
            return None
        return record

    def put(self, session_id: str, record: SessionRecord) -> None:
        self._sessions[session_id] = record

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        expired = [sid for sid, rec in self._sessions.items() if self._is_expired(rec)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


def new_session_id() -> str:
    return secrets.token_urlsafe(16)


session_store = InMemorySessionStore(max_age=timedelta(days=settings.session_max_age_days))
