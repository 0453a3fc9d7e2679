from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from ..common.serializers import to_jsonable
from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewNotification, Notification
from .repository import NotificationRepository

_COLUMNS = """
    notification_id, recipient_id, type, title, message, payload,
    related_entry_id, related_period_id, is_read, created_at
"""


def _to_notification(row: dict[str, Any]) -> Notification:
    payload = row.get("payload") or {}
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        payload = json.loads(payload) if payload else {}
    return Notification(
        notification_id=int(row["notification_id"]),
        recipient_id=int(row["recipient_id"]),
        type=NotificationType(row["type"]),
        title=row["title"],
        message=row["message"],
        created_at=row["created_at"],
        is_read=bool(row.get("is_read")),
        payload=payload,
        related_entry_id=row.get("related_entry_id"),
        related_period_id=row.get("related_period_id"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notification: NewNotification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(
                    recipient_id, type, title, message, payload, related_entry_id, related_period_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(notification.recipient_id),
                    notification.type.value,
                    notification.title[:200],
                    notification.message[:1000],
                    json.dumps(to_jsonable(notification.payload)),
                    notification.related_entry_id,
                    notification.related_period_id,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (int(notification_id),))
            row = fetchone(cur)
            return _to_notification(row) if row else None

    def list_for_recipient(self, recipient_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        where = "recipient_id=%s" + (" AND is_read=0" if unread_only else "")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM notifications WHERE {where} ORDER BY created_at DESC, notification_id DESC LIMIT %s",
                (int(recipient_id), int(limit)),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, recipient_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE recipient_id=%s AND is_read=0",
                (int(recipient_id),),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE notification_id=%s", (int(notification_id),))
            return cur.rowcount > 0

    def mark_all_read(self, recipient_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE recipient_id=%s AND is_read=0",
                (int(recipient_id),),
            )
            return int(cur.rowcount)
