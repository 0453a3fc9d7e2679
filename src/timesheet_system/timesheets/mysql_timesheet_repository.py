from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import EntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, placeholders
from .model import EntryFilter, TimeEntry
from .repository import TimesheetRepository

_COLUMNS = """
    entry_id, employee_id, project_id, entry_date, hours, description, status,
    approved_by, approved_at, rejection_reason, created_at, updated_at
"""


def _to_entry(row: dict[str, Any]) -> TimeEntry:
    return TimeEntry(
        entry_id=int(row["entry_id"]),
        employee_id=int(row["employee_id"]),
        project_id=int(row["project_id"]),
        entry_date=row["entry_date"],
        hours=as_decimal(row["hours"]),
        description=row["description"],
        status=EntryStatus(row["status"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def create(
        self,
        *,
        employee_id: int,
        project_id: int,
        entry_date: date,
        hours: Decimal,
        description: str,
        status: EntryStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(employee_id, project_id, entry_date, hours, description, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), int(project_id), entry_date, hours, description, status.value),
            )
            return int(cur.lastrowid)

    def update_fields(
        self,
        entry_id: int,
        *,
        project_id: int,
        entry_date: date,
        hours: Decimal,
        description: str,
        status: EntryStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET project_id=%s, entry_date=%s, hours=%s, description=%s, status=%s
                WHERE entry_id=%s
                """,
                (int(project_id), entry_date, hours, description, status.value, int(entry_id)),
            )
            return cur.rowcount > 0

    def set_status(
        self,
        entry_id: int,
        *,
        status: EntryStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE entry_id=%s
                """,
                (status.value, approved_by, approved_at, rejection_reason, int(entry_id)),
            )
            return cur.rowcount > 0

    def approve_submitted(self, entry_ids: Iterable[int], *, approved_by: int, approved_at: datetime) -> Sequence[int]:
        ids = sorted({int(i) for i in entry_ids})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entry_id FROM time_entries
                WHERE entry_id IN ({placeholders(len(ids))}) AND status=%s
                FOR UPDATE
                """,
                (*ids, EntryStatus.SUBMITTED.value),
            )
            submitted = [int(r["entry_id"]) for r in fetchall(cur)]
            if submitted:
                cur.execute(
                    f"""
                    UPDATE time_entries
                    SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=NULL
                    WHERE entry_id IN ({placeholders(len(submitted))})
                    """,
                    (EntryStatus.APPROVED.value, int(approved_by), approved_at, *submitted),
                )
            return submitted

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0

    def list_entries(self, criteria: EntryFilter) -> Sequence[TimeEntry]:
        clauses = ["1=1"]
        params: list[object] = []
        if criteria.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(criteria.employee_id))
        if criteria.project_id is not None:
            clauses.append("project_id=%s")
            params.append(int(criteria.project_id))
        if criteria.status is not None:
            clauses.append("status=%s")
            params.append(criteria.status.value)
        if criteria.start_date is not None:
            clauses.append("entry_date >= %s")
            params.append(criteria.start_date)
        if criteria.end_date is not None:
            clauses.append("entry_date <= %s")
            params.append(criteria.end_date)
        params.append(int(criteria.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE {' AND '.join(clauses)}
                ORDER BY entry_date DESC, entry_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def sum_hours(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        statuses: Iterable[EntryStatus],
        exclude_entry_id: Optional[int] = None,
    ) -> Decimal:
        status_values = [s.value for s in statuses]
        if not status_values:
            return Decimal("0")
        sql = f"""
            SELECT COALESCE(SUM(hours), 0) AS total
            FROM time_entries
            WHERE employee_id=%s AND entry_date BETWEEN %s AND %s
              AND status IN ({placeholders(len(status_values))})
        """
        params: list[object] = [int(employee_id), start_date, end_date, *status_values]
        if exclude_entry_id is not None:
            sql += " AND entry_id <> %s"
            params.append(int(exclude_entry_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return as_decimal(row["total"]) if row else Decimal("0")
