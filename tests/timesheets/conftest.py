from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pytest

from fakes import InMemoryEntries, InMemoryLimits, InMemoryPeriods, InMemoryProjects, InMemoryUsers, RecordingDispatcher
from timesheet_system.core.actor import Actor
from timesheet_system.core.enums import PeriodStatus, Role
from timesheet_system.limits.model import HourLimit
from timesheet_system.limits.validator import HourLimitValidator
from timesheet_system.periods.gate import PeriodGate
from timesheet_system.periods.model import ReportingPeriod
from timesheet_system.timesheets.admission import AdmissionPipeline
from timesheet_system.timesheets.service import TimesheetService


@dataclass
class World:
    users: InMemoryUsers
    projects: InMemoryProjects
    periods: InMemoryPeriods
    limits: InMemoryLimits
    entries: InMemoryEntries
    dispatcher: RecordingDispatcher
    pipeline: AdmissionPipeline
    service: TimesheetService
    admin: Actor
    erin: Actor
    finn: Actor
    project_id: int
    other_project_id: int


@pytest.fixture
def world() -> World:
    users = InMemoryUsers()
    admin = users.add(full_name="Admin", role=Role.ADMIN)
    erin = users.add(full_name="Erin")
    finn = users.add(full_name="Finn")

    projects = InMemoryProjects()
    project = projects.add(name="Tools", assigned=[erin.account_id, finn.account_id])
    other = projects.add(name="Portal", assigned=[finn.account_id])

    periods = InMemoryPeriods(
        [
            ReportingPeriod(
                period_id=1,
                name="March",
                start_date=date(2026, 3, 1),
                end_date=date(2026, 3, 31),
                status=PeriodStatus.ACTIVE,
            )
        ]
    )
    limits = InMemoryLimits()
    limits.save(
        HourLimit(
            employee_id=erin.account_id,
            weekly_limit=Decimal("40"),
            daily_limit=Decimal("24"),
            warning_threshold=90,
        )
    )
    entries = InMemoryEntries()
    dispatcher = RecordingDispatcher()
    pipeline = AdmissionPipeline(
        entries, projects, users, PeriodGate(periods), HourLimitValidator(limits, entries), dispatcher=dispatcher
    )

    return World(
        users=users,
        projects=projects,
        periods=periods,
        limits=limits,
        entries=entries,
        dispatcher=dispatcher,
        pipeline=pipeline,
        service=TimesheetService(entries, pipeline, dispatcher=dispatcher),
        admin=Actor.admin(admin.account_id),
        erin=Actor.employee(erin.account_id),
        finn=Actor.employee(finn.account_id),
        project_id=project.project_id,
        other_project_id=other.project_id,
    )
