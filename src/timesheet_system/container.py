from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .cost_centers.mysql_cost_center_repository import MySQLCostCenterRepository
from .cost_centers.repository import CostCenterRepository
from .cost_centers.service import CostCenterService
from .database.connection import DBConfig, DatabaseConnection
from .limits.model import HourLimitDefaults
from .limits.mysql_limit_repository import MySQLHourLimitRepository
from .limits.repository import HourLimitRepository
from .limits.service import HourLimitService
from .limits.validator import HourLimitValidator
from .notifications.dispatcher import InAppNotificationDispatcher, NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .periods.gate import PeriodGate
from .periods.mysql_period_repository import MySQLPeriodRepository
from .periods.repository import PeriodRepository
from .periods.service import PeriodService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .timesheets.admission import AdmissionPipeline
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService
from .users.credential_guard import CredentialGuard, LoginPolicy
from .users.mysql_user_repository import MySQLUserRepository
from .users.rate_limiter import CounterStore, LoginRateLimiter
from .users.repository import UserRepository
from .users.service import AuthService, ProfileService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    projects_repo: ProjectRepository
    cost_centers_repo: CostCenterRepository
    periods_repo: PeriodRepository
    limits_repo: HourLimitRepository
    entries_repo: TimesheetRepository
    notifications_repo: NotificationRepository

    dispatcher: NotificationDispatcher
    period_gate: PeriodGate
    limit_validator: HourLimitValidator

    auth_service: AuthService
    user_service: UserService
    profile_service: ProfileService
    project_service: ProjectService
    cost_center_service: CostCenterService
    period_service: PeriodService
    hour_limit_service: HourLimitService
    timesheet_service: TimesheetService
    notification_service: NotificationService


def wire(
    *,
    users_repo: UserRepository,
    projects_repo: ProjectRepository,
    cost_centers_repo: CostCenterRepository,
    periods_repo: PeriodRepository,
    limits_repo: HourLimitRepository,
    entries_repo: TimesheetRepository,
    notifications_repo: NotificationRepository,
    conn: Optional[DatabaseConnection] = None,
    login_policy: Optional[dict] = None,
    rate_limit: Optional[dict] = None,
    hour_limit_defaults: Optional[dict] = None,
    counter_store: Optional[CounterStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> Container:
    """Build every service on top of the given repositories."""
    dispatcher = dispatcher or InAppNotificationDispatcher(notifications_repo)
    period_gate = PeriodGate(periods_repo)
    limit_validator = HourLimitValidator(
        limits_repo, entries_repo, defaults=HourLimitDefaults.from_dict(hour_limit_defaults)
    )

    auth_service = AuthService(
        users_repo,
        guard=CredentialGuard(LoginPolicy.from_dict(login_policy)),
        rate_limiter=LoginRateLimiter.from_dict(rate_limit, store=counter_store),
    )
    pipeline = AdmissionPipeline(
        entries_repo,
        projects_repo,
        users_repo,
        period_gate,
        limit_validator,
        dispatcher=dispatcher,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        cost_centers_repo=cost_centers_repo,
        periods_repo=periods_repo,
        limits_repo=limits_repo,
        entries_repo=entries_repo,
        notifications_repo=notifications_repo,
        dispatcher=dispatcher,
        period_gate=period_gate,
        limit_validator=limit_validator,
        auth_service=auth_service,
        user_service=UserService(users_repo),
        profile_service=ProfileService(users_repo, projects_repo),
        project_service=ProjectService(projects_repo, users_repo, cost_centers_repo),
        cost_center_service=CostCenterService(cost_centers_repo, projects_repo, users_repo),
        period_service=PeriodService(periods_repo, users_repo, gate=period_gate, dispatcher=dispatcher),
        hour_limit_service=HourLimitService(limits_repo, users_repo, entries_repo, limit_validator),
        timesheet_service=TimesheetService(entries_repo, pipeline, dispatcher=dispatcher),
        notification_service=NotificationService(notifications_repo),
    )


def build_container(
    *,
    db_config: dict,
    login_policy: Optional[dict] = None,
    rate_limit: Optional[dict] = None,
    hour_limit_defaults: Optional[dict] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        cost_centers_repo=MySQLCostCenterRepository(conn),
        periods_repo=MySQLPeriodRepository(conn),
        limits_repo=MySQLHourLimitRepository(conn),
        entries_repo=MySQLTimesheetRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        login_policy=login_policy,
        rate_limit=rate_limit,
        hour_limit_defaults=hour_limit_defaults,
    )
