from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from fakes import ExplodingDispatcher, InMemoryNotifications
from timesheet_system.core.enums import NotificationType
from timesheet_system.notifications.dispatcher import InAppNotificationDispatcher, safe_emit


def test_hour_limit_warning_message():
    store = InMemoryNotifications()
    InAppNotificationDispatcher(store).emit(
        NotificationType.HOUR_LIMIT_WARNING,
        {
            "recipient_id": 7,
            "employee_id": 7,
            "entry_id": 12,
            "current_hours": Decimal("36"),
            "weekly_limit": Decimal("40"),
            "percentage": Decimal("90.00"),
            "week_start": date(2026, 3, 1),
            "week_end": date(2026, 3, 7),
        },
    )

    [n] = store.items.values()
    assert n.recipient_id == 7
    assert n.title == "Weekly Hour Limit Warning"
    assert n.message == (
        "You have logged 36 hours out of your 40 hour weekly limit (90.0%). Week: 2026-03-01 - 2026-03-07"
    )
    assert n.related_entry_id == 12
    assert "recipient_id" not in n.payload


def test_status_change_titles():
    store = InMemoryNotifications()
    dispatcher = InAppNotificationDispatcher(store)
    dispatcher.emit(
        NotificationType.TIMESHEET_STATUS_CHANGED,
        {"recipient_id": 7, "entry_id": 1, "entry_date": date(2026, 3, 4), "status": "approved"},
    )
    dispatcher.emit(
        NotificationType.TIMESHEET_STATUS_CHANGED,
        {
            "recipient_id": 7,
            "entry_id": 2,
            "entry_date": date(2026, 3, 5),
            "status": "rejected",
            "rejection_reason": "Wrong project",
        },
    )

    approved, rejected = sorted(store.items.values(), key=lambda n: n.notification_id)
    assert approved.title == "Timesheet Approved"
    assert rejected.title == "Timesheet Rejected"
    assert rejected.message.endswith("Reason: Wrong project")


def test_period_opened_fans_out_once_per_recipient():
    store = InMemoryNotifications()
    InAppNotificationDispatcher(store).emit(
        NotificationType.PERIOD_OPENED,
        {
            "recipient_ids": [3, 4, 3],
            "period_id": 9,
            "name": "March",
            "start_date": date(2026, 3, 1),
            "end_date": date(2026, 3, 31),
        },
    )

    assert sorted(n.recipient_id for n in store.items.values()) == [3, 4]
    assert {n.title for n in store.items.values()} == {"New Timesheet Period Available"}
    assert {n.related_period_id for n in store.items.values()} == {9}


def test_safe_emit_swallows_and_logs(caplog):
    with caplog.at_level(logging.ERROR, logger="timesheet_system.notifications.dispatcher"):
        delivered = safe_emit(ExplodingDispatcher(), NotificationType.PERIOD_OPENED, {"recipient_ids": [1]})

    assert delivered is False
    assert "Failed to emit period_opened notification" in caplog.text


def test_safe_emit_without_dispatcher_is_a_noop():
    assert safe_emit(None, NotificationType.PERIOD_OPENED, {}) is False
