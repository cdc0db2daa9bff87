"""
In-memory session registry. Nothing is persisted: a restart drops everything.
"""

from __future__ import annotations
import logging
import secrets
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, Optional

from .state import Session

log = logging.getLogger(__name__)

class SessionStore:
    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}

    def now(self) -> float:
        return self._clock()

    def get_or_create(self, session_id: Optional[str]) -> Session:
        with self._lock:
            self._evict_expired()
            if session_id and session_id in self._sessions:
                return self._sessions[session_id]
            sid = secrets.token_urlsafe(16)
            sess = Session(id=sid, touched_at=self._clock())
            self._sessions[sid] = sess
            log.debug("new session %s", sid)
            return sess

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def update(self, session_id: str, fn: Callable[[Session], Session]) -> Session:
        """
        Apply a transition atomically. fn receives the current session and
        returns the replacement; exceptions leave the stored session untouched.
        """
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                current = Session(id=session_id, touched_at=self._clock())
            new = fn(current)
            new = replace(new, touched_at=self._clock())
            self._sessions[session_id] = new
            return new

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self._ttl
        stale = [sid for sid, s in self._sessions.items() if s.touched_at < cutoff]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            log.info("evicted %d idle sessions", len(stale))
