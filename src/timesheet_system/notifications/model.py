from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    created_at: datetime
    is_read: bool = False
    payload: dict[str, Any] = field(default_factory=dict)
    related_entry_id: Optional[int] = None
    related_period_id: Optional[int] = None


@dataclass(frozen=True)
class NewNotification:
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    related_entry_id: Optional[int] = None
    related_period_id: Optional[int] = None
