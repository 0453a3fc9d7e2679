from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..core import constants
from ..core.exceptions import RateLimitExceeded


class CounterStore(Protocol):
    """Where per-client attempt counters live.

    The in-memory store below is process scoped; a shared cache can implement
    the same two methods for multi-instance deployments.
    """

    def increment(self, key: str, *, now: datetime, ttl: timedelta) -> tuple[int, datetime]:
        """Bump ``key`` and return (count, window expiry)."""
        raise NotImplementedError

    def reset(self, key: str) -> None:
        raise NotImplementedError


@dataclass
class _Window:
    count: int
    expires_at: datetime


class InMemoryCounterStore(CounterStore):
    """Fixed-window counters keyed by client; forgotten on restart."""

    def __init__(self) -> None:
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, *, now: datetime, ttl: timedelta) -> tuple[int, datetime]:
        with self._lock:
            self._evict_expired(now)
            window = self._windows.get(key)
            if window is None:
                window = _Window(count=0, expires_at=now + ttl)
                self._windows[key] = window
            window.count += 1
            return window.count, window.expires_at

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def _evict_expired(self, now: datetime) -> None:
        expired = [k for k, w in self._windows.items() if w.expires_at <= now]
        for k in expired:
            del self._windows[k]

    def __len__(self) -> int:
        return len(self._windows)


class LoginRateLimiter:
    """Caps login attempts per client key (usually the remote IP)."""

    def __init__(
        self,
        store: Optional[CounterStore] = None,
        *,
        max_attempts: int = constants.DEFAULT_RATE_LIMIT_ATTEMPTS,
        window_minutes: int = constants.DEFAULT_LOGIN_WINDOW_MINUTES,
    ):
        self._store = store or InMemoryCounterStore()
        self._max_attempts = int(max_attempts)
        self._window = timedelta(minutes=int(window_minutes))

    @classmethod
    def from_dict(cls, values: Optional[dict], store: Optional[CounterStore] = None) -> "LoginRateLimiter":
        values = values or {}
        return cls(
            store,
            max_attempts=int(values.get("max_attempts", constants.DEFAULT_RATE_LIMIT_ATTEMPTS)),
            window_minutes=int(values.get("window_minutes", constants.DEFAULT_LOGIN_WINDOW_MINUTES)),
        )

    def hit(self, key: str, *, now: datetime) -> int:
        count, expires_at = self._store.increment(f"login:{key}", now=now, ttl=self._window)
        if count > self._max_attempts:
            raise RateLimitExceeded(retry_after_seconds=max(1, math.ceil((expires_at - now).total_seconds())))
        return count

    def reset(self, key: str) -> None:
        self._store.reset(f"login:{key}")
