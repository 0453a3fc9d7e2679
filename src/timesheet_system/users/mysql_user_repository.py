from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account, LoginState
from .repository import UserRepository

_COLUMNS = """
    user_id, full_name, email, password_hash, role, department, position,
    is_active, failed_attempts, last_failed_at, locked_until
"""


def _to_account(row: dict[str, Any]) -> Account:
    return Account(
        account_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        position=row.get("position"),
        is_active=bool(row.get("is_active", True)),
        failed_attempts=int(row.get("failed_attempts") or 0),
        last_failed_at=row.get("last_failed_at"),
        locked_until=row.get("locked_until"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, account_id: int) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(account_id),))
            row = fetchone(cur)
            return _to_account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _to_account(row) if row else None

    def create_account(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        position: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, department, position, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (full_name, email.strip().lower(), password_hash, role.value, department, position),
            )
            return int(cur.lastrowid)

    def save_login_state(self, account_id: int, state: LoginState) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET failed_attempts=%s, last_failed_at=%s, locked_until=%s
                WHERE user_id=%s
                """,
                (int(state.failed_attempts), state.last_failed_at, state.locked_until, int(account_id)),
            )

    def update_profile(
        self,
        account_id: int,
        *,
        full_name: str,
        department: Optional[str],
        position: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE user_id=%s", (int(account_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE users SET full_name=%s, department=%s, position=%s WHERE user_id=%s",
                (full_name, department, position, int(account_id)),
            )
            return True

    def set_password_hash(self, account_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE user_id=%s", (int(account_id),))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(account_id)))
            return True

    def set_active(self, account_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(account_id)))
            return cur.rowcount > 0

    def delete_by_id(self, account_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(account_id),))
            return cur.rowcount > 0

    def list_accounts(self, *, role: Optional[Role] = None, active_only: bool = False) -> Sequence[Account]:
        clauses = ["1=1"]
        params: list[object] = []
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)
        if active_only:
            clauses.append("is_active=1")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {' AND '.join(clauses)} ORDER BY full_name",
                tuple(params),
            )
            return [_to_account(r) for r in fetchall(cur)]
