from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import PeriodStatus, PeriodVisibility
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import ReportingPeriod
from .repository import PeriodRepository

_COLUMNS = "period_id, name, start_date, end_date, status, visibility, description, created_by"


def _to_period(row: dict[str, Any], members: frozenset[int]) -> ReportingPeriod:
    return ReportingPeriod(
        period_id=int(row["period_id"]),
        name=row["name"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=PeriodStatus(row["status"]),
        visibility=PeriodVisibility(row["visibility"]),
        restricted_members=members,
        description=row.get("description"),
        created_by=row.get("created_by"),
    )


class MySQLPeriodRepository(PeriodRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _with_members(self, cur, rows: list[dict]) -> list[ReportingPeriod]:
        if not rows:
            return []
        ids = [int(r["period_id"]) for r in rows]
        cur.execute(
            f"SELECT period_id, employee_id FROM period_members WHERE period_id IN ({placeholders(len(ids))})",
            tuple(ids),
        )
        members: dict[int, set[int]] = defaultdict(set)
        for r in fetchall(cur):
            members[int(r["period_id"])].add(int(r["employee_id"]))
        return [_to_period(r, frozenset(members[int(r["period_id"])])) for r in rows]

    @staticmethod
    def _replace_members(cur, period_id: int, restricted_members: Iterable[int]) -> None:
        cur.execute("DELETE FROM period_members WHERE period_id=%s", (int(period_id),))
        member_rows = [(int(period_id), int(m)) for m in sorted(set(restricted_members))]
        if member_rows:
            cur.executemany("INSERT INTO period_members(period_id, employee_id) VALUES(%s,%s)", member_rows)

    def get_by_id(self, period_id: int) -> Optional[ReportingPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM reporting_periods WHERE period_id=%s", (int(period_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._with_members(cur, [row])[0]

    def list_periods(self, *, status: Optional[PeriodStatus] = None) -> Sequence[ReportingPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"SELECT {_COLUMNS} FROM reporting_periods ORDER BY start_date DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM reporting_periods WHERE status=%s ORDER BY start_date DESC",
                    (status.value,),
                )
            return self._with_members(cur, fetchall(cur))

    def list_active_covering(self, day: date) -> Sequence[ReportingPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reporting_periods
                WHERE status=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date DESC
                """,
                (PeriodStatus.ACTIVE.value, day, day),
            )
            return self._with_members(cur, fetchall(cur))

    def create_period(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        status: PeriodStatus,
        visibility: PeriodVisibility,
        restricted_members: Iterable[int],
        description: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reporting_periods(name, start_date, end_date, status, visibility, description, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, start_date, end_date, status.value, visibility.value, description, created_by),
            )
            period_id = int(cur.lastrowid)
            self._replace_members(cur, period_id, restricted_members)
            return period_id

    def update_period(
        self,
        *,
        period_id: int,
        name: str,
        start_date: date,
        end_date: date,
        status: PeriodStatus,
        visibility: PeriodVisibility,
        restricted_members: Iterable[int],
        description: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT period_id FROM reporting_periods WHERE period_id=%s", (int(period_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE reporting_periods
                SET name=%s, start_date=%s, end_date=%s, status=%s, visibility=%s, description=%s
                WHERE period_id=%s
                """,
                (name, start_date, end_date, status.value, visibility.value, description, int(period_id)),
            )
            self._replace_members(cur, period_id, restricted_members)
            return True

    def delete_period(self, period_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM reporting_periods WHERE period_id=%s", (int(period_id),))
            return cur.rowcount > 0
