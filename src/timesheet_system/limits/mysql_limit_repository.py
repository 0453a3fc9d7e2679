from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import HourLimit, HourLimitDefaults
from .repository import HourLimitRepository

_COLUMNS = """
    limit_id, employee_id, weekly_limit, daily_limit, warning_threshold, enforce_limit,
    is_custom, notes, effective_from, effective_to, last_modified_by
"""


def _to_limit(row: dict[str, Any]) -> HourLimit:
    return HourLimit(
        limit_id=int(row["limit_id"]),
        employee_id=int(row["employee_id"]),
        weekly_limit=as_decimal(row["weekly_limit"]),
        daily_limit=as_decimal(row["daily_limit"]),
        warning_threshold=int(row["warning_threshold"]),
        enforce_limit=bool(row["enforce_limit"]),
        is_custom=bool(row["is_custom"]),
        notes=row.get("notes"),
        effective_from=row.get("effective_from"),
        effective_to=row.get("effective_to"),
        last_modified_by=row.get("last_modified_by"),
    )


class MySQLHourLimitRepository(HourLimitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int) -> Optional[HourLimit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hour_limits WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_limit(row) if row else None

    def get_or_create(self, employee_id: int, defaults: HourLimitDefaults) -> HourLimit:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE + unique employee_id: losers of a race just read the winner's row.
            cur.execute(
                """
                INSERT IGNORE INTO hour_limits(employee_id, weekly_limit, daily_limit, warning_threshold, enforce_limit)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    defaults.weekly_limit,
                    defaults.daily_limit,
                    int(defaults.warning_threshold),
                    1 if defaults.enforce else 0,
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM hour_limits WHERE employee_id=%s", (int(employee_id),))
            return _to_limit(fetchone(cur))

    def save(self, limit: HourLimit) -> HourLimit:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hour_limits(
                    employee_id, weekly_limit, daily_limit, warning_threshold, enforce_limit,
                    is_custom, notes, effective_from, effective_to, last_modified_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    weekly_limit=VALUES(weekly_limit),
                    daily_limit=VALUES(daily_limit),
                    warning_threshold=VALUES(warning_threshold),
                    enforce_limit=VALUES(enforce_limit),
                    is_custom=VALUES(is_custom),
                    notes=VALUES(notes),
                    effective_from=VALUES(effective_from),
                    effective_to=VALUES(effective_to),
                    last_modified_by=VALUES(last_modified_by)
                """,
                (
                    int(limit.employee_id),
                    limit.weekly_limit,
                    limit.daily_limit,
                    int(limit.warning_threshold),
                    1 if limit.enforce_limit else 0,
                    1 if limit.is_custom else 0,
                    limit.notes,
                    limit.effective_from,
                    limit.effective_to,
                    limit.last_modified_by,
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM hour_limits WHERE employee_id=%s", (int(limit.employee_id),))
            return _to_limit(fetchone(cur))

    def delete(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM hour_limits WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0

    def list_limits(self, *, custom_only: bool = False) -> Sequence[HourLimit]:
        where = "WHERE is_custom=1" if custom_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hour_limits {where} ORDER BY employee_id")
            return [_to_limit(r) for r in fetchall(cur)]
