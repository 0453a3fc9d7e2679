from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from werkzeug.security import check_password_hash

from ..common.datetime_utils import minutes_until
from ..core import constants
from .model import Account, LoginState

logger = logging.getLogger(__name__)


class LoginDecision(str, Enum):
    ALLOW = "allow"
    REJECT_LOCKED = "reject_locked"
    REJECT_INVALID_CREDENTIALS = "reject_invalid_credentials"


@dataclass(frozen=True)
class LoginPolicy:
    max_attempts: int = constants.DEFAULT_MAX_LOGIN_ATTEMPTS
    window_minutes: int = constants.DEFAULT_LOGIN_WINDOW_MINUTES
    lockout_minutes: int = constants.DEFAULT_LOCKOUT_MINUTES

    @classmethod
    def from_dict(cls, values: Optional[dict]) -> "LoginPolicy":
        values = values or {}
        return cls(
            max_attempts=int(values.get("max_attempts", constants.DEFAULT_MAX_LOGIN_ATTEMPTS)),
            window_minutes=int(values.get("window_minutes", constants.DEFAULT_LOGIN_WINDOW_MINUTES)),
            lockout_minutes=int(values.get("lockout_minutes", constants.DEFAULT_LOCKOUT_MINUTES)),
        )


@dataclass(frozen=True)
class LoginEvaluation:
    decision: LoginDecision
    state: LoginState
    changed: bool
    retry_after_minutes: Optional[int] = None

    @property
    def allowed(self) -> bool:
        return self.decision == LoginDecision.ALLOW


def verify_password(password_hash: str, supplied_password: str) -> bool:
    try:
        return check_password_hash(password_hash, supplied_password)
    except (ValueError, TypeError):
        # placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class CredentialGuard:
    """Login attempt throttling and account lockout state machine.

    The guard never touches storage: it returns the new lockout state and the
    caller persists it when ``changed`` is set.
    """

    def __init__(
        self,
        policy: Optional[LoginPolicy] = None,
        *,
        password_checker: Callable[[str, str], bool] = verify_password,
    ):
        self._policy = policy or LoginPolicy()
        self._check_password = password_checker

    @property
    def policy(self) -> LoginPolicy:
        return self._policy

    def evaluate_login(self, account: Account, supplied_password: str, now: datetime) -> LoginEvaluation:
        current = LoginState.of(account)

        if account.is_locked(now):
            return LoginEvaluation(
                decision=LoginDecision.REJECT_LOCKED,
                state=current,
                changed=False,
                retry_after_minutes=minutes_until(account.locked_until, now),
            )

        if self._check_password(account.password_hash, supplied_password):
            cleared = LoginState()
            return LoginEvaluation(decision=LoginDecision.ALLOW, state=cleared, changed=cleared != current)

        return LoginEvaluation(
            decision=LoginDecision.REJECT_INVALID_CREDENTIALS,
            state=self._register_failure(account, current, now),
            changed=True,
        )

    def _register_failure(self, account: Account, current: LoginState, now: datetime) -> LoginState:
        window_start = now - timedelta(minutes=self._policy.window_minutes)
        if current.last_failed_at is None or current.last_failed_at < window_start:
            attempts = 1
        else:
            attempts = current.failed_attempts + 1

        locked_until = current.locked_until
        if attempts >= self._policy.max_attempts:
            locked_until = now + timedelta(minutes=self._policy.lockout_minutes)
            # The lockout timestamp now carries the "locked" signal, so the
            # counter restarts from zero.
            attempts = 0
            logger.warning("Account %s locked until %s after repeated failed logins", account.account_id, locked_until)

        return LoginState(failed_attempts=attempts, last_failed_at=now, locked_until=locked_until)
