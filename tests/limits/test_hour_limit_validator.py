from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fakes import InMemoryEntries, InMemoryLimits
from timesheet_system.core.enums import EntryStatus
from timesheet_system.core.exceptions import DailyLimitExceeded, WeeklyLimitExceeded
from timesheet_system.limits.model import HourLimit, HourLimitDefaults
from timesheet_system.limits.validator import HourLimitValidator

EMPLOYEE = 7
# Wednesday; its week runs Sunday 2026-03-01 .. Saturday 2026-03-07.
WEDNESDAY = date(2026, 3, 4)


def _validator(weekly="40", daily="24", threshold=90, enforce=True):
    limits = InMemoryLimits()
    limits.save(
        HourLimit(
            employee_id=EMPLOYEE,
            weekly_limit=Decimal(weekly),
            daily_limit=Decimal(daily),
            warning_threshold=threshold,
            enforce_limit=enforce,
        )
    )
    entries = InMemoryEntries()
    return HourLimitValidator(limits, entries), entries, limits


def _log(entries, day, hours, status=EntryStatus.DRAFT, project_id=1):
    return entries.add(employee_id=EMPLOYEE, project_id=project_id, entry_date=day, hours=hours, status=status)


def test_empty_week_accepts_without_warning():
    validator, _, _ = _validator()

    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("8"))

    assert check.warning is False
    assert check.projected_weekly == Decimal("8")
    assert check.percentage == Decimal("20.00")
    assert (check.week_start, check.week_end) == (date(2026, 3, 1), date(2026, 3, 7))


def test_weekly_limit_rejects_with_details():
    validator, entries, _ = _validator()
    for i, hours in enumerate(["8", "8", "8", "8", "6"]):
        _log(entries, date(2026, 3, 1 + i), hours)

    with pytest.raises(WeeklyLimitExceeded) as exc:
        validator.validate(EMPLOYEE, date(2026, 3, 6), Decimal("5"))

    assert exc.value.current_week_sum == Decimal("38")
    assert exc.value.weekly_limit == Decimal("40")
    assert exc.value.projected == Decimal("43")


def test_daily_limit_is_a_per_entry_cap():
    validator, _, _ = _validator()
    with pytest.raises(DailyLimitExceeded) as exc:
        validator.validate(EMPLOYEE, WEDNESDAY, Decimal("25"))
    assert exc.value.limit == Decimal("24")


def test_exactly_at_limit_is_accepted():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 3, 2), "32")
    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("8"))
    assert check.projected_weekly == Decimal("40")
    assert check.warning is True


def test_rejected_entries_do_not_count():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 3, 2), "20", status=EntryStatus.REJECTED)
    _log(entries, date(2026, 3, 3), "10", status=EntryStatus.APPROVED)
    _log(entries, date(2026, 3, 3), "10", status=EntryStatus.SUBMITTED, project_id=2)

    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("4"))

    assert check.current_week_sum == Decimal("20")


def test_other_weeks_are_ignored():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 2, 28), "24")  # Saturday before
    _log(entries, date(2026, 3, 8), "24")  # Sunday after

    assert validator.validate(EMPLOYEE, WEDNESDAY, Decimal("8")).current_week_sum == Decimal("0")


def test_excluded_entry_is_left_out_of_the_sum():
    validator, entries, _ = _validator()
    existing = _log(entries, WEDNESDAY, "24")

    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("20"), exclude_entry_id=existing.entry_id)

    assert check.current_week_sum == Decimal("0")
    assert check.projected_weekly == Decimal("20")


def test_unenforced_limit_only_warns():
    validator, entries, _ = _validator(enforce=False)
    _log(entries, date(2026, 3, 2), "38")

    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("5"))

    assert check.projected_weekly == Decimal("43")
    assert check.warning is True
    assert check.percentage == Decimal("107.50")


def test_crossing_is_reported_only_once():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 3, 2), "30")

    crossing = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("6"))
    assert crossing.warning and crossing.crossed_warning

    _log(entries, WEDNESDAY, "6")
    after = validator.validate(EMPLOYEE, date(2026, 3, 5), Decimal("1"))
    assert after.warning and not after.crossed_warning


def test_bypass_skips_every_check():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 3, 2), "24")
    _log(entries, date(2026, 3, 3), "16")

    check = validator.validate(EMPLOYEE, WEDNESDAY, Decimal("30"), bypass=True)

    assert check.bypassed is True
    assert check.warning is False


def test_validation_is_idempotent():
    validator, entries, _ = _validator()
    _log(entries, date(2026, 3, 2), "12")

    assert validator.validate(EMPLOYEE, WEDNESDAY, Decimal("8")) == validator.validate(EMPLOYEE, WEDNESDAY, Decimal("8"))


def test_weekly_sum_is_order_independent():
    hours = ["1.25", "7.5", "3.75", "0.25"]
    sums = []
    for ordering in (hours, list(reversed(hours))):
        validator, entries, _ = _validator()
        for i, h in enumerate(ordering):
            _log(entries, date(2026, 3, 1 + i), h)
        sums.append(validator.week_sum(EMPLOYEE, WEDNESDAY))
    assert sums[0] == sums[1] == Decimal("12.75")


def test_missing_limit_is_created_from_defaults():
    limits = InMemoryLimits()
    validator = HourLimitValidator(limits, InMemoryEntries(), HourLimitDefaults.from_dict({"weekly_limit": "50"}))

    validator.validate(99, WEDNESDAY, Decimal("8"))
    validator.validate(99, WEDNESDAY, Decimal("8"))

    assert limits.created == 1
    assert limits.get(99).weekly_limit == Decimal("50")
    assert limits.get(99).daily_limit == Decimal("24")
