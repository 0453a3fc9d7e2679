from __future__ import annotations

from ..core.actor import Actor
from ..core.enums import EntryStatus
from ..core.exceptions import InvalidStatusTransition
from .model import TimeEntry

# Status moves reachable through an edit. Approve/reject have their own
# operations because they stamp reviewer fields.
EDIT_TRANSITIONS: dict[EntryStatus, frozenset[EntryStatus]] = {
    EntryStatus.DRAFT: frozenset({EntryStatus.DRAFT, EntryStatus.SUBMITTED}),
    EntryStatus.SUBMITTED: frozenset({EntryStatus.SUBMITTED}),
    EntryStatus.APPROVED: frozenset({EntryStatus.APPROVED}),
    EntryStatus.REJECTED: frozenset({EntryStatus.REJECTED}),
}

REVIEW_TRANSITIONS: dict[EntryStatus, frozenset[EntryStatus]] = {
    EntryStatus.SUBMITTED: frozenset({EntryStatus.APPROVED, EntryStatus.REJECTED}),
}

CREATE_STATUSES = frozenset({EntryStatus.DRAFT, EntryStatus.SUBMITTED})


def ensure_editable(actor: Actor, entry: TimeEntry, target: EntryStatus) -> None:
    """Owners edit drafts only; admins may correct fields in any status."""
    if not actor.is_admin and entry.status != EntryStatus.DRAFT:
        raise InvalidStatusTransition(entry.status)
    if target not in EDIT_TRANSITIONS[entry.status]:
        raise InvalidStatusTransition(entry.status, target)


def ensure_reviewable(entry: TimeEntry, target: EntryStatus) -> None:
    if target not in REVIEW_TRANSITIONS.get(entry.status, frozenset()):
        raise InvalidStatusTransition(
            entry.status,
            target,
            message=f"Only submitted timesheets can be {target.value}",
        )


def can_delete(actor: Actor, entry: TimeEntry) -> bool:
    if actor.is_admin:
        return True
    return entry.employee_id == actor.user_id and entry.status == EntryStatus.DRAFT
