from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from timesheet_system.core.exceptions import RateLimitExceeded
from timesheet_system.users.rate_limiter import InMemoryCounterStore, LoginRateLimiter

NOW = datetime(2026, 3, 4, 9, 0, 0)


def test_hits_within_cap_are_counted():
    limiter = LoginRateLimiter(max_attempts=3, window_minutes=15)
    assert [limiter.hit("10.0.0.1", now=NOW) for _ in range(3)] == [1, 2, 3]


def test_exceeding_cap_raises_with_retry_after():
    limiter = LoginRateLimiter(max_attempts=2, window_minutes=15)
    limiter.hit("10.0.0.1", now=NOW)
    limiter.hit("10.0.0.1", now=NOW)

    with pytest.raises(RateLimitExceeded) as exc:
        limiter.hit("10.0.0.1", now=NOW + timedelta(minutes=5))

    assert exc.value.retry_after_seconds == 600
    assert exc.value.status_code == 429


def test_keys_are_independent():
    limiter = LoginRateLimiter(max_attempts=1, window_minutes=15)
    limiter.hit("a", now=NOW)
    assert limiter.hit("b", now=NOW) == 1


def test_window_expiry_resets_counter():
    store = InMemoryCounterStore()
    limiter = LoginRateLimiter(store, max_attempts=1, window_minutes=15)
    limiter.hit("a", now=NOW)

    assert limiter.hit("a", now=NOW + timedelta(minutes=15)) == 1
    assert len(store) == 1


def test_reset_forgets_key():
    limiter = LoginRateLimiter(max_attempts=1, window_minutes=15)
    limiter.hit("a", now=NOW)
    limiter.reset("a")
    assert limiter.hit("a", now=NOW) == 1


def test_from_dict_reads_policy():
    limiter = LoginRateLimiter.from_dict({"max_attempts": 1, "window_minutes": 1})
    limiter.hit("a", now=NOW)
    with pytest.raises(RateLimitExceeded):
        limiter.hit("a", now=NOW)
