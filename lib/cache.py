# =============================================================================
# lib/cache.py - Thread-Safe TTL Cache
# =============================================================================
# A small mutex-guarded map whose entries expire after a fixed time-to-live.
#
# Used for two process-wide stores:
# - the catalog cache (keyed by connection identity, fixed expiry)
# - the session database config store (sliding expiry, refreshed on read)
#
# Entries are never mutated after being written; they are replaced or expire.
#
# Usage:
#   cache = TTLCache(ttl_seconds=300)
#   cache.set("postgresql://app@db:5432/sales", catalog)
#   catalog = cache.get("postgresql://app@db:5432/sales")
# =============================================================================

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TTLCache:
    """
    Mutex-guarded key/value store with per-entry expiry.

    Attributes:
        ttl_seconds: Lifetime of an entry
        sliding: If True, a successful read restarts the entry's lifetime
    """

    def __init__(
        self,
        ttl_seconds: float,
        sliding: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.sliding = sliding
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            now = self._clock()
            if self._expired(entry, now):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None

            if self.sliding:
                entry.stored_at = now
            return entry.value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def purge_expired(self) -> list[str]:
        """
        Drop every expired entry.

        Returns:
            The keys that were removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._expired(e, now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info(f"Purged {len(expired)} expired cache entries")
        return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
