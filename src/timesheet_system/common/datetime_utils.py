from __future__ import annotations

import math
from datetime import date, datetime, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (or a bare date) into a naive local datetime.

    Offsets are converted to local time before being dropped, matching
    now_local().
    """
    value = value.strip()
    if len(value) == 10:
        return datetime.combine(parse_iso_date(value), datetime.min.time())
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday..Saturday week (both inclusive) containing ``day``."""
    # date.weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (day.weekday() + 1) % 7
    start = day - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=6)


def minutes_until(later: datetime, now: datetime) -> int:
    """Whole minutes from ``now`` to ``later``, rounded up."""
    return math.ceil((later - now).total_seconds() / 60)
