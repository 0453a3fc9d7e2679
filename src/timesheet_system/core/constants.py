"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_MAX_LOGIN_ATTEMPTS = 5
DEFAULT_LOGIN_WINDOW_MINUTES = 15
DEFAULT_LOCKOUT_MINUTES = 15

# Per-client login cap; must stay above DEFAULT_MAX_LOGIN_ATTEMPTS.
DEFAULT_RATE_LIMIT_ATTEMPTS = 20

DEFAULT_WEEKLY_LIMIT = Decimal("80")
DEFAULT_DAILY_LIMIT = Decimal("24")
DEFAULT_WARNING_THRESHOLD = 90
DEFAULT_ENFORCE_LIMIT = True

MIN_ENTRY_HOURS = Decimal("0.25")
MAX_ENTRY_HOURS = Decimal("24")
MAX_DESCRIPTION_LENGTH = 500
MIN_PASSWORD_LENGTH = 8

DEFAULT_LIST_LIMIT = 200
