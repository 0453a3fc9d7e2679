from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dotenv import load_dotenv

from timesheet_system.common.logging_config import configure_logging
from timesheet_system.config import get_settings_module
from timesheet_system.database.bootstrap import DEMO_ACCOUNTS, apply_seed_sql, ensure_demo_users

logger = logging.getLogger("timesheet_system.scripts.seed_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config)
    ensure_demo_users(db_config)

    for _, email, _, role, _, _ in DEMO_ACCOUNTS:
        logger.info("Demo account ready: %s (%s)", email, role)


if __name__ == "__main__":
    main()
