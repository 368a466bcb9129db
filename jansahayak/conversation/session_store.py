"""
Session persistence contract and an in-memory implementation.

A session past its TTL is indistinguishable from one that never existed.
Writes can be made conditional on the revision that was read, which is how
the orchestrator keeps each session's turns strictly sequential without a
global lock.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from ..errors import CapacityError, ConflictError, NotFoundError
from ..models import Session

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def get(self, session_id: str) -> Session: ...

    def put(self, session: Session, ttl: timedelta) -> Session: ...

    def put_if_revision(self, session: Session, ttl: timedelta, expected_revision: Optional[int]) -> Session: ...

    def delete(self, session_id: str) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore:
    """Thread-safe, TTL-bound session store holding deep copies."""

    def __init__(self, max_sessions: int = 10_000, clock: Callable[[], datetime] = _utcnow):
        self.max_sessions = max_sessions
        self.clock = clock
        self._entries: dict[str, tuple[Session, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Session:
        """Stored session; raises NotFoundError when absent or expired."""
        with self._lock:
            session = self._live(session_id)
            if session is None:
                raise NotFoundError("session", session_id)
            return session.model_copy(deep=True)

    def put(self, session: Session, ttl: timedelta) -> Session:
        """Unconditional, idempotent overwrite."""
        with self._lock:
            current = self._live(session.session_id)
            revision = (current.revision if current else session.revision) + 1
            return self._write(session, ttl, revision, is_new=current is None)

    def put_if_revision(self, session: Session, ttl: timedelta, expected_revision: Optional[int]) -> Session:
        """Write only if the stored revision still equals `expected_revision`.

        `expected_revision=None` means the caller saw no stored session.

        Raises:
            ConflictError: another writer committed in between.
            CapacityError: the store is full.
        """
        with self._lock:
            current = self._live(session.session_id)
            stored_revision = current.revision if current else None
            if stored_revision != expected_revision:
                raise ConflictError(
                    f"Session {session.session_id} changed concurrently "
                    f"(expected revision {expected_revision}, found {stored_revision})"
                )
            revision = (stored_revision or 0) + 1
            return self._write(session, ttl, revision, is_new=current is None)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _live(self, session_id: str) -> Optional[Session]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        session, expires_at = entry
        if self.clock() > expires_at:
            del self._entries[session_id]
            return None
        return session

    def _write(self, session: Session, ttl: timedelta, revision: int, is_new: bool) -> Session:
        if is_new and len(self._entries) >= self.max_sessions:
            self._purge_expired()
            if len(self._entries) >= self.max_sessions:
                raise CapacityError(f"Session store is full ({self.max_sessions} sessions)")
        stored = session.model_copy(deep=True)
        stored.revision = revision
        self._entries[stored.session_id] = (stored, self.clock() + ttl)
        return stored.model_copy(deep=True)

    def _purge_expired(self) -> None:
        now = self.clock()
        expired = [sid for sid, (_, expires_at) in self._entries.items() if now > expires_at]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")
