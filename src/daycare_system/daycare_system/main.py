from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activities.controller import register as register_activities
from .attendance.controller import register as register_attendance
from .billing.controller import register as register_billing
from .billing.model import RateSchedule
from .children.controller import register as register_children
from .classrooms.controller import register as register_classrooms
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_INVOICE_DUE_DAYS
from .core.logging import get_logger, setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables, missing_tables
from .medical_alerts.controller import register as register_medical_alerts
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = get_logger()

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _settings_dict(settings) -> dict:
    return {name: getattr(settings, name) for name in dir(settings) if name.isupper()}


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Pass ``container`` to skip database setup entirely (tests use in-memory fakes).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

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
            apply_schema(db_config, schema_path=PROJECT_ROOT / "database" / "schema.sql")
            tables = list_tables(db_config)
            logger.info("schema ready (tables=%d)", len(tables))
            missing = missing_tables(tables)
            if missing:
                logger.warning("schema is missing tables: %s", ", ".join(missing))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=PROJECT_ROOT / "database" / "seed.sql")
            accounts = ensure_demo_users(db_config)
            logger.info("demo seed ready (%s)", ", ".join(sorted(accounts)))

        container = build_container(
            db_config=db_config,
            rates=RateSchedule.from_settings(_settings_dict(settings)),
            invoice_due_days=int(getattr(settings, "INVOICE_DUE_DAYS", DEFAULT_INVOICE_DUE_DAYS)),
        )

    register_error_handlers(app)
    register_users(app, container)
    register_children(app, container)
    register_classrooms(app, container)
    register_attendance(app, container)
    register_billing(app, container)
    register_notifications(app, container)
    register_medical_alerts(app, container)
    register_activities(app, container)
    register_reports(app, container)

    return app
