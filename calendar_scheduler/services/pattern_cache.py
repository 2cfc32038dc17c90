"""In-process cache of learned productivity patterns with a fixed TTL."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from calendar_scheduler.models.entities import ProductivityPattern

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24


class PatternCache:
    """
    Thread-safe map of subject id -> ProductivityPattern.

    Entries expire `ttl` after they were written. Expiry is enforced on read;
    `sweep()` (or the optional background sweeper) drops stale entries so the
    map does not grow without bound.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=DEFAULT_TTL_HOURS),
        clock: Callable[[], datetime] = datetime.now
    ):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[ProductivityPattern, datetime]] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def get(self, subject_id: str) -> Optional[ProductivityPattern]:
        """Cached pattern, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(subject_id)
            if entry is None:
                return None
            pattern, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[subject_id]
                return None
            return pattern

    def set(self, subject_id: str, pattern: ProductivityPattern) -> None:
        with self._lock:
            self._entries[subject_id] = (pattern, self._clock() + self.ttl)

    def invalidate(self, subject_id: str) -> bool:
        """Drop one entry. Returns True if something was removed."""
        with self._lock:
            return self._entries.pop(subject_id, None) is not None

    def clear(self) -> None:
        """Clear all cached patterns."""
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Remove expired entries and return how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired patterns")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def start_sweeper(self, interval: timedelta = timedelta(hours=1)) -> None:
        """Run sweep() periodically on a daemon thread until stop_sweeper()."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return

        self._stop_event.clear()
        seconds = interval.total_seconds()

        def _run():
            while not self._stop_event.wait(seconds):
                self.sweep()

        self._sweeper = threading.Thread(target=_run, name="pattern-cache-sweeper", daemon=True)
        self._sweeper.start()
        logger.info(f"Pattern cache sweeper started (every {seconds:.0f}s)")

    def stop_sweeper(self, timeout: Optional[float] = None) -> None:
        if self._sweeper is None:
            return
        self._stop_event.set()
        self._sweeper.join(timeout)
        self._sweeper = None
        logger.info("Pattern cache sweeper stopped")
