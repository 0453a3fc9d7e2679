from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CostCenter
from .repository import CostCenterRepository

_COLUMNS = "cost_center_id, name, code, description, budget, department, manager_id, is_active"


def _to_cost_center(row: dict[str, Any]) -> CostCenter:
    return CostCenter(
        cost_center_id=int(row["cost_center_id"]),
        name=row["name"],
        code=row["code"],
        description=row.get("description"),
        budget=Decimal(str(row.get("budget") or 0)),
        department=row.get("department"),
        manager_id=int(row["manager_id"]) if row.get("manager_id") is not None else None,
        is_active=bool(row.get("is_active", True)),
    )


class MySQLCostCenterRepository(CostCenterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, cost_center_id: int) -> Optional[CostCenter]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM cost_centers WHERE cost_center_id=%s", (int(cost_center_id),))
            row = fetchone(cur)
            return _to_cost_center(row) if row else None

    def create_cost_center(
        self,
        *,
        name: str,
        code: str,
        description: Optional[str],
        budget: Decimal,
        department: Optional[str],
        manager_id: Optional[int],
        is_active: bool,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cost_centers(name, code, description, budget, department, manager_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, code, description, budget, department, manager_id, 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def update_cost_center(
        self,
        cost_center_id: int,
        *,
        name: str,
        code: str,
        description: Optional[str],
        budget: Decimal,
        department: Optional[str],
        manager_id: Optional[int],
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT cost_center_id FROM cost_centers WHERE cost_center_id=%s", (int(cost_center_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE cost_centers
                SET name=%s, code=%s, description=%s, budget=%s, department=%s, manager_id=%s, is_active=%s
                WHERE cost_center_id=%s
                """,
                (name, code, description, budget, department, manager_id, 1 if is_active else 0, int(cost_center_id)),
            )
            return True

    def delete_cost_center(self, cost_center_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cost_centers WHERE cost_center_id=%s", (int(cost_center_id),))
            return cur.rowcount > 0

    def list_cost_centers(
        self,
        *,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Sequence[CostCenter]:
        clauses = ["1=1"]
        params: list[object] = []
        if department:
            clauses.append("department=%s")
            params.append(department)
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)
        if search:
            clauses.append("(LOWER(name) LIKE %s OR LOWER(code) LIKE %s)")
            pattern = f"%{search.strip().lower()}%"
            params.extend([pattern, pattern])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM cost_centers WHERE {' AND '.join(clauses)} "
                "ORDER BY created_at DESC, cost_center_id DESC",
                tuple(params),
            )
            return [_to_cost_center(r) for r in fetchall(cur)]
