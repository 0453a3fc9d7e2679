from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from ..core.enums import EntryStatus, NotificationType
from .model import NewNotification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def emit(self, event_type: NotificationType, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError


def _fmt_hours(value: Any) -> str:
    number = Decimal(str(value))
    text = f"{number:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def _hour_limit_warning(payload: Mapping[str, Any]) -> tuple[str, str]:
    message = (
        f"You have logged {_fmt_hours(payload['current_hours'])} hours out of your "
        f"{_fmt_hours(payload['weekly_limit'])} hour weekly limit "
        f"({Decimal(str(payload['percentage'])):.1f}%). "
        f"Week: {payload['week_start']} - {payload['week_end']}"
    )
    return "Weekly Hour Limit Warning", message


def _status_changed(payload: Mapping[str, Any]) -> tuple[str, str]:
    status = EntryStatus(payload["status"])
    entry_date = payload.get("entry_date")
    if status == EntryStatus.APPROVED:
        return "Timesheet Approved", f"Your timesheet for {entry_date} has been approved."
    if status == EntryStatus.REJECTED:
        message = f"Your timesheet for {entry_date} has been rejected."
        if payload.get("rejection_reason"):
            message += f" Reason: {payload['rejection_reason']}"
        return "Timesheet Rejected", message
    return "Timesheet Updated", f"Your timesheet for {entry_date} is now {status.value}."


def _period_opened(payload: Mapping[str, Any]) -> tuple[str, str]:
    message = (
        f'Timesheet period "{payload["name"]}" is now open for time entry '
        f"({payload['start_date']} to {payload['end_date']})."
    )
    return "New Timesheet Period Available", message


_BUILDERS: dict[NotificationType, Callable[[Mapping[str, Any]], tuple[str, str]]] = {
    NotificationType.HOUR_LIMIT_WARNING: _hour_limit_warning,
    NotificationType.TIMESHEET_STATUS_CHANGED: _status_changed,
    NotificationType.PERIOD_OPENED: _period_opened,
}


def _recipients(payload: Mapping[str, Any]) -> list[int]:
    ids: Iterable[Any] = payload.get("recipient_ids") or ()
    if not ids and payload.get("recipient_id") is not None:
        ids = (payload["recipient_id"],)
    # de-dupe, keep order
    return list(dict.fromkeys(int(i) for i in ids))


class InAppNotificationDispatcher(NotificationDispatcher):
    """Writes one notification row per recipient."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def emit(self, event_type: NotificationType, payload: Mapping[str, Any]) -> None:
        event_type = NotificationType(event_type)
        title, message = _BUILDERS[event_type](payload)
        body = {k: v for k, v in payload.items() if k not in ("recipient_id", "recipient_ids")}

        for recipient_id in _recipients(payload):
            self._notifications.create(
                NewNotification(
                    recipient_id=recipient_id,
                    type=event_type,
                    title=title,
                    message=message,
                    payload=body,
                    related_entry_id=payload.get("entry_id"),
                    related_period_id=payload.get("period_id"),
                )
            )


def safe_emit(
    dispatcher: Optional[NotificationDispatcher],
    event_type: NotificationType,
    payload: Mapping[str, Any],
) -> bool:
    """Fire-and-forget; a failing dispatcher never fails the caller."""
    if dispatcher is None:
        return False
    try:
        dispatcher.emit(event_type, payload)
        return True
    except Exception:
        logger.exception("Failed to emit %s notification", getattr(event_type, "value", event_type))
        return False
