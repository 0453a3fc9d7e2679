from __future__ import annotations

from typing import Sequence

from ..core.actor import Actor
from ..core.exceptions import NotFoundError
from .model import Notification
from .repository import NotificationRepository

MAX_PAGE_SIZE = 100


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def list_for(self, *, actor: Actor, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        limit = max(1, min(int(limit), MAX_PAGE_SIZE))
        return self._notifications.list_for_recipient(actor.user_id, unread_only=unread_only, limit=limit)

    def unread_count(self, *, actor: Actor) -> int:
        return self._notifications.count_unread(actor.user_id)

    def mark_read(self, *, actor: Actor, notification_id: int) -> None:
        notification = self._notifications.get_by_id(int(notification_id))
        # Someone else's notification looks the same as a missing one.
        if not notification or notification.recipient_id != actor.user_id:
            raise NotFoundError("Notification", notification_id)
        if not notification.is_read:
            self._notifications.mark_read(notification.notification_id)

    def mark_all_read(self, *, actor: Actor) -> int:
        return self._notifications.mark_all_read(actor.user_id)
