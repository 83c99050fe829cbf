"""In-memory log of recent visitors."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from pixel_canvas.core.settings import settings
from pixel_canvas.services.identity import is_loopback


@dataclass(frozen=True)
class VisitorLocation:
    """Coarse location attached to a visit."""

    city: str = "Unknown"
    country: str = "Unknown"
    region: str | None = None


@dataclass(frozen=True)
class Visit:
    """One recorded visit. The IP is kept for de-duplication only."""

    ip: str
    location: VisitorLocation
    timestamp_ms: int


Locator = Callable[[str], VisitorLocation]


def locate_local_only(ip: str) -> VisitorLocation:
    """Recognise loopback visitors; everything else is unknown."""
    if is_loopback(ip):
        return VisitorLocation(city="Local", country="localhost")
    return VisitorLocation()


class VisitorLog:
    """Bounded, newest-first log with one entry per ``ip|session``.

    The seen-set is cleared once it exceeds ``max_seen`` so memory stays
    bounded; a cleared visitor may then be logged again.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        max_seen: int | None = None,
        locate: Locator = locate_local_only,
    ) -> None:
        self._entries: deque[Visit] = deque(
            maxlen=max_entries if max_entries is not None else settings.recent_visitors_max
        )
        self._seen: set[str] = set()
        self._max_seen = max_seen if max_seen is not None else settings.recent_visitors_seen_max
        self._locate = locate
        self._lock = Lock()

    def record(self, ip: str, session_id: str | None) -> bool:
        """Log a visit unless this ``ip|session`` was already seen.

        Returns:
            True if a new entry was added.
        """
        key = f"{ip}|{session_id or 'anon'}"
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            if len(self._seen) > self._max_seen:
                self._seen.clear()
            visit = Visit(ip=ip, location=self._locate(ip), timestamp_ms=int(time.time() * 1000))
            self._entries.appendleft(visit)
        return True

    def recent(self) -> list[Visit]:
        """Return logged visits, newest first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_VISITOR_LOG = VisitorLog()


def get_visitor_log() -> VisitorLog:
    """Return the process-wide visitor log."""
    return _VISITOR_LOG
