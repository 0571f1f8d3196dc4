from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import install_identity_loader, register_error_handlers
from .common.log_config import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_default_policy, list_tables
from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .notifications.controller import register as register_notifications
from .policy.controller import register as register_policy
from .reports.controller import register as register_reports
from .requests.controller import register as register_requests
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` replaces the MySQL wiring, which is how the HTTP tests run
    without a database.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ALLOW_TIME_OVERRIDE"] = bool(getattr(settings, "ALLOW_TIME_OVERRIDE", False))
    app.json.sort_keys = False

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("Starting timeclock with settings=%s", settings_module)

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_POLICY", False)):
            ensure_default_policy(db_config)

        container = build_container(db_config=db_config)

    app.extensions["timeclock.container"] = container

    register_error_handlers(app)
    install_identity_loader(app, container.users_repo)

    register_policy(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    register_users(app, container)
    register_reports(app, container)
    register_notifications(app, container)
    register_audit(app, container)

    return app
