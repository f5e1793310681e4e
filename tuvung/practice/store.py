"""In-memory registry of running practice sessions and flashcard tests."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generic, TypeVar

from .errors import SessionNotFound

log = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Entry(Generic[T]):
    owner_id: str
    value: T
    touched_at: datetime = field(default_factory=_utcnow)


class SessionStore(Generic[T]):
    """Keep per-user objects keyed by a random id, expiring idle ones."""

    def __init__(self, ttl: timedelta, clock: Callable[[], datetime] = _utcnow) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, _Entry[T]] = {}
        self._lock = threading.Lock()

    def create(self, owner_id: str, value: T) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._evict_expired()
            self._entries[session_id] = _Entry(owner_id=owner_id, value=value, touched_at=self._clock())
        log.info("[SESSION CREATE] id=%s owner=%s total=%s", session_id, owner_id, len(self._entries))
        return session_id

    def get(self, session_id: str, owner_id: str) -> T:
        """Return the object, refreshing its idle timer.

        Unknown, expired and foreign ids all raise ``session_not_found``.
        """

        with self._lock:
            self._evict_expired()
            entry = self._entries.get(session_id)
            if entry is None or entry.owner_id != owner_id:
                raise SessionNotFound()
            entry.touched_at = self._clock()
            return entry.value

    def discard(self, session_id: str, owner_id: str) -> bool:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or entry.owner_id != owner_id:
                return False
            self._entries.pop(session_id, None)
        log.info("[SESSION DISCARD] id=%s owner=%s", session_id, owner_id)
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now - entry.touched_at > self._ttl]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            log.info("[SESSION EXPIRE] evicted=%s", len(expired))
        return len(expired)
