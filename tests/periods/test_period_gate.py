from __future__ import annotations

from datetime import date, datetime

import pytest

from fakes import InMemoryPeriods
from timesheet_system.core.enums import PeriodStatus, PeriodVisibility
from timesheet_system.periods.gate import PeriodGate
from timesheet_system.periods.model import ReportingPeriod

MARCH = (date(2026, 3, 1), date(2026, 3, 31))


def _period(period_id, *, status=PeriodStatus.ACTIVE, visibility=PeriodVisibility.ALL_EMPLOYEES, members=(), span=MARCH):
    return ReportingPeriod(
        period_id=period_id,
        name=f"P{period_id}",
        start_date=span[0],
        end_date=span[1],
        status=status,
        visibility=visibility,
        restricted_members=frozenset(members),
    )


def test_active_all_employees_period_admits_anyone():
    gate = PeriodGate(InMemoryPeriods([_period(1)]))
    assert gate.is_date_admissible(42, date(2026, 3, 15))


@pytest.mark.parametrize("day", [date(2026, 3, 1), date(2026, 3, 31)])
def test_bounds_are_inclusive(day):
    gate = PeriodGate(InMemoryPeriods([_period(1)]))
    assert gate.is_date_admissible(42, day)


def test_dates_outside_range_are_refused():
    gate = PeriodGate(InMemoryPeriods([_period(1)]))
    assert not gate.is_date_admissible(42, date(2026, 4, 1))
    assert not gate.is_date_admissible(42, date(2026, 2, 28))


@pytest.mark.parametrize("status", [PeriodStatus.UPCOMING, PeriodStatus.CLOSED])
def test_non_active_periods_never_admit(status):
    gate = PeriodGate(InMemoryPeriods([_period(1, status=status)]))
    assert not gate.is_date_admissible(42, date(2026, 3, 15))


def test_restricted_period_admits_members_only():
    gate = PeriodGate(InMemoryPeriods([_period(1, visibility=PeriodVisibility.RESTRICTED, members=[7])]))
    assert gate.is_date_admissible(7, date(2026, 3, 15))
    assert not gate.is_date_admissible(8, date(2026, 3, 15))


def test_any_overlapping_period_granting_access_is_enough():
    periods = InMemoryPeriods(
        [
            _period(1, visibility=PeriodVisibility.RESTRICTED, members=[99]),
            _period(2, visibility=PeriodVisibility.RESTRICTED, members=[7], span=(date(2026, 3, 10), date(2026, 3, 20))),
        ]
    )
    gate = PeriodGate(periods)

    assert gate.is_date_admissible(7, date(2026, 3, 15))
    assert gate.find_admitting_period(7, date(2026, 3, 15)).period_id == 2
    assert gate.find_admitting_period(7, date(2026, 3, 25)) is None


def test_widening_visibility_never_revokes_access():
    restricted = _period(1, visibility=PeriodVisibility.RESTRICTED, members=[7])
    opened = _period(1, visibility=PeriodVisibility.ALL_EMPLOYEES)
    for employee_id in (7, 8):
        before = PeriodGate(InMemoryPeriods([restricted])).is_date_admissible(employee_id, date(2026, 3, 15))
        after = PeriodGate(InMemoryPeriods([opened])).is_date_admissible(employee_id, date(2026, 3, 15))
        assert after or not before


def test_accessible_periods_use_todays_date():
    periods = InMemoryPeriods(
        [
            _period(1),
            _period(2, span=(date(2026, 4, 1), date(2026, 4, 30))),
            _period(3, visibility=PeriodVisibility.RESTRICTED, members=[8]),
        ]
    )
    gate = PeriodGate(periods)

    accessible = gate.list_accessible_periods(7, datetime(2026, 3, 4, 12, 0))

    assert [p.period_id for p in accessible] == [1]
