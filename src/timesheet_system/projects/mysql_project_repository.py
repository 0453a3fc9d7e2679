from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional, Sequence

from ..core.enums import ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Project
from .repository import ProjectRepository

_COLUMNS = "p.project_id, p.name, p.code, p.status, p.description, p.is_active, p.cost_center_id"


def _to_project(row: dict[str, Any], assigned: frozenset[int]) -> Project:
    return Project(
        project_id=int(row["project_id"]),
        name=row["name"],
        code=row["code"],
        status=ProjectStatus(row["status"]),
        description=row.get("description"),
        is_active=bool(row.get("is_active", True)),
        cost_center_id=int(row["cost_center_id"]) if row.get("cost_center_id") is not None else None,
        assigned_employee_ids=assigned,
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects p WHERE p.project_id=%s", (int(project_id),))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute("SELECT employee_id FROM project_assignments WHERE project_id=%s", (int(project_id),))
            assigned = frozenset(int(r["employee_id"]) for r in fetchall(cur))
            return _to_project(row, assigned)

    def create_project(
        self,
        *,
        name: str,
        code: str,
        status: ProjectStatus,
        description: Optional[str],
        cost_center_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO projects(name, code, status, description, cost_center_id) VALUES(%s,%s,%s,%s,%s)",
                (name, code, status.value, description, cost_center_id),
            )
            return int(cur.lastrowid)

    def list_projects(
        self, *, employee_id: Optional[int] = None, cost_center_id: Optional[int] = None
    ) -> Sequence[Project]:
        joins = ""
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            joins = "JOIN project_assignments pa ON pa.project_id = p.project_id"
            clauses.append("pa.employee_id=%s")
            params.append(int(employee_id))
        if cost_center_id is not None:
            clauses.append("p.cost_center_id=%s")
            params.append(int(cost_center_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM projects p {joins} WHERE {' AND '.join(clauses)} ORDER BY p.name",
                tuple(params),
            )
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [int(r["project_id"]) for r in rows]
            cur.execute(
                f"SELECT project_id, employee_id FROM project_assignments WHERE project_id IN ({placeholders(len(ids))})",
                tuple(ids),
            )
            assigned: dict[int, set[int]] = defaultdict(set)
            for r in fetchall(cur):
                assigned[int(r["project_id"])].add(int(r["employee_id"]))

            return [_to_project(r, frozenset(assigned[int(r["project_id"])])) for r in rows]

    def set_cost_center(self, project_id: int, cost_center_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT project_id FROM projects WHERE project_id=%s", (int(project_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE projects SET cost_center_id=%s WHERE project_id=%s",
                (int(cost_center_id) if cost_center_id is not None else None, int(project_id)),
            )
            return True

    def count_by_cost_center(self, cost_center_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM projects WHERE cost_center_id=%s", (int(cost_center_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def add_assignment(self, *, project_id: int, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO project_assignments(project_id, employee_id) VALUES(%s,%s)",
                (int(project_id), int(employee_id)),
            )
            return cur.rowcount > 0

    def remove_assignment(self, *, project_id: int, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM project_assignments WHERE project_id=%s AND employee_id=%s",
                (int(project_id), int(employee_id)),
            )
            return cur.rowcount > 0
