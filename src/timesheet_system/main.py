from __future__ import annotations

import importlib
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.logging_config import configure_logging
from .common.web import ok, register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .cost_centers.controller import register as register_cost_centers
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .limits.controller import register as register_limits
from .notifications.controller import register as register_notifications
from .periods.controller import register as register_periods
from .projects.controller import register as register_projects
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory. Pass a ready container to skip database bootstrap."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config)
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            login_policy=getattr(settings, "LOGIN_POLICY", None),
            rate_limit=getattr(settings, "RATE_LIMIT", None),
            hour_limit_defaults=getattr(settings, "HOUR_LIMIT_DEFAULTS", None),
        )

    app.extensions["timesheet_container"] = container
    register_error_handlers(app)

    @app.get("/api/health", endpoint="health")
    def health():
        return ok({"status": "ok"})

    register_users(app, container)
    register_projects(app, container)
    register_cost_centers(app, container)
    register_periods(app, container)
    register_limits(app, container)
    register_timesheets(app, container)
    register_notifications(app, container)

    return app


def run() -> None:
    app = create_app()
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")), debug=app.config["DEBUG"])


if __name__ == "__main__":
    run()
