from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .calendar.controller import register as register_calendar
from .common.web import error_body
from .container import Container, build_container
from .core.exceptions import DomainError, ValidationError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .employees.controller import register as register_employees
from .holidays.controller import register as register_holidays
from .notifications.controller import register as register_notifications
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]

STATUS_BY_CODE = {
    "validation-error": 400,
    "authentication-error": 401,
    "authorization-error": 403,
    "not-found": 404,
    "invalid-transition": 409,
    "conflict": 409,
    "remote-unavailable": 503,
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        extra = {"errors": e.errors} if isinstance(e, ValidationError) else {}
        return error_body(e.code, str(e), STATUS_BY_CODE.get(e.code, 400), **extra)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = "not-found" if e.code == 404 else "http-error"
        return error_body(code, e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = f"Internal error: {e}" if app.config.get("DEBUG") else "Internal error"
        return error_body("internal-error", message, 500)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = dict(getattr(settings, "DB_CONFIG"))

    # Fail fast on missing DB settings; this is not recovered from.
    db = DBConfig.from_settings(db_config)
    logger.info("settings=%s db=%s@%s:%s/%s", settings_module, db.user, db.host, db.port, db.database)

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            local_store_path=getattr(settings, "LOCAL_STORE_PATH", "") or None,
            session_timeout_minutes=int(getattr(settings, "SESSION_TIMEOUT_MINUTES", 30)),
        )

    register_error_handlers(app)
    register_employees(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    register_holidays(app, container)
    register_notifications(app, container)
    register_calendar(app, container)

    return app
