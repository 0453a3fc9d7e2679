"""Policy values shared by every environment.

All of them can be overridden through environment variables (or a .env file)
without code changes.
"""

import os
from decimal import Decimal

from ..core import constants


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "1" if default else "0").strip().lower() in {"1", "true", "yes", "on"}


LOGIN_POLICY = {
    "max_attempts": _env_int("LOGIN_MAX_ATTEMPTS", constants.DEFAULT_MAX_LOGIN_ATTEMPTS),
    "window_minutes": _env_int("LOGIN_ATTEMPT_WINDOW_MINUTES", constants.DEFAULT_LOGIN_WINDOW_MINUTES),
    "lockout_minutes": _env_int("LOGIN_LOCKOUT_MINUTES", constants.DEFAULT_LOCKOUT_MINUTES),
}

RATE_LIMIT = {
    "max_attempts": _env_int("RATE_LIMIT_MAX_ATTEMPTS", constants.DEFAULT_RATE_LIMIT_ATTEMPTS),
    "window_minutes": _env_int("RATE_LIMIT_WINDOW_MINUTES", constants.DEFAULT_LOGIN_WINDOW_MINUTES),
}

HOUR_LIMIT_DEFAULTS = {
    "weekly_limit": Decimal(os.getenv("DEFAULT_WEEKLY_LIMIT", str(constants.DEFAULT_WEEKLY_LIMIT))),
    "daily_limit": Decimal(os.getenv("DEFAULT_DAILY_LIMIT", str(constants.DEFAULT_DAILY_LIMIT))),
    "warning_threshold": _env_int("DEFAULT_WARNING_THRESHOLD", constants.DEFAULT_WARNING_THRESHOLD),
    "enforce": _env_bool("DEFAULT_ENFORCE_LIMIT", constants.DEFAULT_ENFORCE_LIMIT),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
