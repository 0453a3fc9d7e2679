from __future__ import annotations

from datetime import date, datetime

import pytest

from timesheet_system.core.enums import EntryStatus, NotificationType
from timesheet_system.core.exceptions import AuthorizationError, InvalidStatusTransition, ValidationError

NOW = datetime(2026, 3, 6, 17, 0, 0)


def _entry(world, actor=None, day=date(2026, 3, 4), status=EntryStatus.DRAFT):
    result = world.service.create_entry(
        actor=actor or world.erin,
        project_id=world.project_id,
        entry_date=day,
        hours="8",
        description="Work",
        status=status,
    )
    return result.entry


def test_owner_submits_draft(world):
    entry = _entry(world)
    result = world.service.submit_entry(actor=world.erin, entry_id=entry.entry_id)
    assert result.entry.status == EntryStatus.SUBMITTED
    assert world.entries.get_by_id(entry.entry_id).status == EntryStatus.SUBMITTED


def test_owner_cannot_edit_submitted_entry(world):
    entry = _entry(world, status=EntryStatus.SUBMITTED)
    with pytest.raises(InvalidStatusTransition) as exc:
        world.service.update_entry(actor=world.erin, entry_id=entry.entry_id, hours="4")
    assert str(exc.value) == "Cannot update submitted timesheet"
    assert exc.value.status_code == 409


def test_owner_cannot_self_approve_through_update(world):
    entry = _entry(world)
    with pytest.raises(InvalidStatusTransition):
        world.service.update_entry(actor=world.erin, entry_id=entry.entry_id, status=EntryStatus.APPROVED)


def test_admin_may_correct_fields_of_approved_entry(world):
    entry = _entry(world, status=EntryStatus.SUBMITTED)
    world.service.approve_entry(actor=world.admin, entry_id=entry.entry_id, now=NOW)

    result = world.service.update_entry(actor=world.admin, entry_id=entry.entry_id, description="Corrected")

    assert result.entry.status == EntryStatus.APPROVED
    assert world.entries.get_by_id(entry.entry_id).description == "Corrected"


def test_approve_requires_submitted_and_stamps_reviewer(world):
    draft = _entry(world)
    with pytest.raises(InvalidStatusTransition):
        world.service.approve_entry(actor=world.admin, entry_id=draft.entry_id, now=NOW)

    world.service.submit_entry(actor=world.erin, entry_id=draft.entry_id)
    approved = world.service.approve_entry(actor=world.admin, entry_id=draft.entry_id, now=NOW)

    assert approved.status == EntryStatus.APPROVED
    assert approved.approved_by == world.admin.user_id
    assert approved.approved_at == NOW

    [payload] = world.dispatcher.of_type(NotificationType.TIMESHEET_STATUS_CHANGED)
    assert payload == {
        "recipient_id": world.erin.user_id,
        "entry_id": draft.entry_id,
        "entry_date": date(2026, 3, 4),
        "status": "approved",
        "rejection_reason": None,
    }


def test_only_admins_review(world):
    entry = _entry(world, status=EntryStatus.SUBMITTED)
    with pytest.raises(AuthorizationError):
        world.service.approve_entry(actor=world.erin, entry_id=entry.entry_id)
    with pytest.raises(AuthorizationError):
        world.service.reject_entry(actor=world.erin, entry_id=entry.entry_id, reason="no")


def test_reject_needs_reason_and_notifies(world):
    entry = _entry(world, status=EntryStatus.SUBMITTED)
    with pytest.raises(ValidationError):
        world.service.reject_entry(actor=world.admin, entry_id=entry.entry_id, reason="  ")

    rejected = world.service.reject_entry(actor=world.admin, entry_id=entry.entry_id, reason="Wrong project")

    assert rejected.status == EntryStatus.REJECTED
    assert rejected.rejection_reason == "Wrong project"
    [payload] = world.dispatcher.of_type(NotificationType.TIMESHEET_STATUS_CHANGED)
    assert payload["status"] == "rejected"

    with pytest.raises(InvalidStatusTransition):
        world.service.approve_entry(actor=world.admin, entry_id=entry.entry_id)


def test_bulk_approve_only_touches_submitted(world):
    submitted_a = _entry(world, day=date(2026, 3, 2), status=EntryStatus.SUBMITTED)
    submitted_b = _entry(world, day=date(2026, 3, 3), status=EntryStatus.SUBMITTED)
    draft = _entry(world, day=date(2026, 3, 4))

    count = world.service.bulk_approve(
        actor=world.admin, entry_ids=[submitted_a.entry_id, submitted_b.entry_id, draft.entry_id, 999], now=NOW
    )

    assert count == 2
    assert world.entries.get_by_id(draft.entry_id).status == EntryStatus.DRAFT
    assert len(world.dispatcher.of_type(NotificationType.TIMESHEET_STATUS_CHANGED)) == 2


def test_delete_rules(world):
    draft = _entry(world, day=date(2026, 3, 2))
    submitted = _entry(world, day=date(2026, 3, 3), status=EntryStatus.SUBMITTED)
    finns = _entry(world, actor=world.finn)

    with pytest.raises(InvalidStatusTransition):
        world.service.delete_entry(actor=world.erin, entry_id=submitted.entry_id)
    with pytest.raises(AuthorizationError):
        world.service.delete_entry(actor=world.erin, entry_id=finns.entry_id)

    world.service.delete_entry(actor=world.erin, entry_id=draft.entry_id)
    world.service.delete_entry(actor=world.admin, entry_id=submitted.entry_id)
    assert set(world.entries.entries) == {finns.entry_id}


def test_listing_scopes_employees_to_themselves(world):
    _entry(world)
    _entry(world, actor=world.finn)
    submitted = _entry(world, day=date(2026, 3, 5), status=EntryStatus.SUBMITTED)

    mine = world.service.list_entries(actor=world.erin, employee_id=world.finn.user_id)
    assert {e.employee_id for e in mine} == {world.erin.user_id}

    assert len(world.service.list_entries(actor=world.admin)) == 3
    only_submitted = world.service.list_entries(actor=world.admin, status=EntryStatus.SUBMITTED)
    assert [e.entry_id for e in only_submitted] == [submitted.entry_id]
    in_range = world.service.list_entries(
        actor=world.admin, start_date=date(2026, 3, 5), end_date=date(2026, 3, 31)
    )
    assert [e.entry_id for e in in_range] == [submitted.entry_id]


def test_get_entry_hides_other_employees(world):
    finns = _entry(world, actor=world.finn)
    with pytest.raises(AuthorizationError):
        world.service.get_entry(actor=world.erin, entry_id=finns.entry_id)
    assert world.service.get_entry(actor=world.admin, entry_id=finns.entry_id).entry_id == finns.entry_id
