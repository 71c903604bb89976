"""In-memory session store.

Sessions live for a fixed TTL counted from creation. There is no reaper thread: an expired session is dropped
the next time anything touches it, and from then on behaves exactly like an unknown id.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..errors import SessionNotFoundError
from ..flights.credentials import CredentialRotator
from ..models import SessionConfig, Tournament, WeekendBucket, WeekendKey, WeekendQuote


@dataclass(slots=True)
class SessionState:
    rotator: CredentialRotator
    config: SessionConfig
    tournaments: list[Tournament]
    buckets: list[WeekendBucket]
    created_at: datetime
    quotes: dict[WeekendKey, WeekendQuote] = field(default_factory=dict)

    def bucket_index(self) -> dict[WeekendKey, WeekendBucket]:
        return {b.key: b for b in self.buckets}


class SessionStore:
    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def expires_at(self, state: SessionState) -> datetime:
        return state.created_at + self.ttl

    def _is_expired(self, state: SessionState) -> bool:
        return self.now() > self.expires_at(state)

    def _live(self, session_id: str) -> SessionState:
        # caller holds the lock
        state = self._sessions.get(session_id)
        if state is not None and self._is_expired(state):
            logging.info("Session %s expired, evicting", session_id)
            del self._sessions[session_id]
            state = None
        if state is None:
            raise SessionNotFoundError("Missing or invalid session. Create a session with your API keys first.")
        return state

    def create(self, state: SessionState) -> str:
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = state
        logging.info("Session %s created with %s API key(s)", session_id, len(state.rotator))
        return session_id

    def get(self, session_id: str) -> SessionState:
        with self._lock:
            return self._live(session_id)

    def update(self, session_id: str, fn: Callable[[SessionState], SessionState]) -> SessionState:
        """Atomically replace the session's state with fn(state)."""
        with self._lock:
            updated = fn(self._live(session_id))
            self._sessions[session_id] = updated
            return updated

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def active_count(self) -> int:
        with self._lock:
            for session_id in [sid for sid, s in self._sessions.items() if self._is_expired(s)]:
                del self._sessions[session_id]
            return len(self._sessions)
