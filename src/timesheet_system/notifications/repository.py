from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def create(self, notification: NewNotification) -> int:
        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_recipient(self, recipient_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        """Newest first."""
        raise NotImplementedError

    def count_unread(self, recipient_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int) -> bool:
        raise NotImplementedError

    def mark_all_read(self, recipient_id: int) -> int:
        raise NotImplementedError
