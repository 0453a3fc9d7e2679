from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account, LoginState


class UserRepository(Protocol):
    """Repository interface for accounts.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, account_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

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
        """Insert an account. Raises UniqueViolation on a duplicate email."""
        raise NotImplementedError

    def save_login_state(self, account_id: int, state: LoginState) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        account_id: int,
        *,
        full_name: str,
        department: Optional[str],
        position: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def set_password_hash(self, account_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def set_active(self, account_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, account_id: int) -> bool:
        raise NotImplementedError

    def list_accounts(self, *, role: Optional[Role] = None, active_only: bool = False) -> Sequence[Account]:
        raise NotImplementedError
