from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_max_length, require_non_empty
from ..core import constants
from ..core.actor import Actor
from ..core.enums import EntryStatus, NotificationType
from ..core.exceptions import AuthorizationError, InvalidStatusTransition, NotFoundError
from ..notifications.dispatcher import NotificationDispatcher, safe_emit
from .admission import AdmissionPipeline, AdmissionResult
from .model import EntryFilter, TimeEntry
from .repository import TimesheetRepository
from .transitions import can_delete, ensure_reviewable

logger = logging.getLogger(__name__)


class TimesheetService:
    """Entry lifecycle: listing, edits through the admission pipeline, review."""

    def __init__(
        self,
        entries: TimesheetRepository,
        pipeline: AdmissionPipeline,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self._entries = entries
        self._pipeline = pipeline
        self._dispatcher = dispatcher

    def _load(self, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Timesheet", entry_id)
        return entry

    def _notify_status(self, entry: TimeEntry, status: EntryStatus, reason: Optional[str] = None) -> None:
        safe_emit(
            self._dispatcher,
            NotificationType.TIMESHEET_STATUS_CHANGED,
            {
                "recipient_id": entry.employee_id,
                "entry_id": entry.entry_id,
                "entry_date": entry.entry_date,
                "status": status.value,
                "rejection_reason": reason,
            },
        )

    def list_entries(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        project_id: Optional[int] = None,
        status: Optional[EntryStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = constants.DEFAULT_LIST_LIMIT,
    ) -> Sequence[TimeEntry]:
        criteria = EntryFilter(
            employee_id=employee_id if actor.is_admin else actor.user_id,
            project_id=project_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            limit=max(1, min(int(limit), constants.DEFAULT_LIST_LIMIT)),
        )
        return self._entries.list_entries(criteria)

    def get_entry(self, *, actor: Actor, entry_id: int) -> TimeEntry:
        entry = self._load(entry_id)
        if not actor.can_view(entry.employee_id):
            raise AuthorizationError("You can only view your own timesheets")
        return entry

    def create_entry(self, *, actor: Actor, **fields: Any) -> AdmissionResult:
        return self._pipeline.create_entry(actor=actor, **fields)

    def update_entry(self, *, actor: Actor, entry_id: int, **fields: Any) -> AdmissionResult:
        return self._pipeline.update_entry(actor=actor, entry_id=entry_id, **fields)

    def submit_entry(self, *, actor: Actor, entry_id: int) -> AdmissionResult:
        return self._pipeline.update_entry(actor=actor, entry_id=entry_id, status=EntryStatus.SUBMITTED)

    def delete_entry(self, *, actor: Actor, entry_id: int) -> None:
        entry = self._load(entry_id)
        if not actor.can_view(entry.employee_id):
            raise AuthorizationError("You can only delete your own timesheets")
        if not can_delete(actor, entry):
            raise InvalidStatusTransition(
                entry.status, message=f"Cannot delete {entry.status.value} timesheet"
            )
        self._entries.delete(entry.entry_id)
        logger.info("Entry %s deleted by %s", entry.entry_id, actor.user_id)

    def approve_entry(self, *, actor: Actor, entry_id: int, now: Optional[datetime] = None) -> TimeEntry:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        entry = self._load(entry_id)
        ensure_reviewable(entry, EntryStatus.APPROVED)

        now = now or now_local()
        self._entries.set_status(entry.entry_id, status=EntryStatus.APPROVED, approved_by=actor.user_id, approved_at=now)
        logger.info("Entry %s approved by %s", entry.entry_id, actor.user_id)
        self._notify_status(entry, EntryStatus.APPROVED)
        return self._load(entry.entry_id)

    def reject_entry(self, *, actor: Actor, entry_id: int, reason: str) -> TimeEntry:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        reason = require_non_empty(reason, "Rejection reason")
        require_max_length(reason, "Rejection reason", constants.MAX_DESCRIPTION_LENGTH)
        entry = self._load(entry_id)
        ensure_reviewable(entry, EntryStatus.REJECTED)

        self._entries.set_status(entry.entry_id, status=EntryStatus.REJECTED, rejection_reason=reason)
        logger.info("Entry %s rejected by %s", entry.entry_id, actor.user_id)
        self._notify_status(entry, EntryStatus.REJECTED, reason)
        return self._load(entry.entry_id)

    def bulk_approve(self, *, actor: Actor, entry_ids: Iterable[int], now: Optional[datetime] = None) -> int:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        approved = self._entries.approve_submitted(entry_ids, approved_by=actor.user_id, approved_at=now or now_local())
        logger.info("Bulk approval by %s: %d entries", actor.user_id, len(approved))
        for entry_id in approved:
            entry = self._entries.get_by_id(entry_id)
            if entry:
                self._notify_status(entry, EntryStatus.APPROVED)
        return len(approved)
