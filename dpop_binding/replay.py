"""JTI replay stores."""

import threading
import time
from typing import Dict, Optional, Protocol


class ReplayStore(Protocol):
    """Keyed set of seen ``jti`` values with insert-if-absent semantics."""

    def add_if_absent(self, jti: str, expires_at: float) -> bool:
        """Record ``jti`` and return True, or return False if already present."""
        ...


class InMemoryReplayStore:
    """
    Thread-safe in-memory replay store for a single process.

    Expired entries are pruned at most once per ``cleanup_interval`` seconds.
    """

    def __init__(self, cleanup_interval: float = 300):
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.time()

    def add_if_absent(self, jti: str, expires_at: float, now: Optional[float] = None) -> bool:
        with self._lock:
            if now is None:
                now = time.time()

            if now - self._last_cleanup > self._cleanup_interval:
                expired = [k for k, exp in self._entries.items() if exp < now]
                for k in expired:
                    del self._entries[k]
                self._last_cleanup = now

            if jti in self._entries and self._entries[jti] > now:
                return False  # Replay

            self._entries[jti] = expires_at
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
