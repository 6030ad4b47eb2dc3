from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import QR_DEFAULT_BORDER, QR_DEFAULT_BOX_SIZE
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PersistenceError,
    StoreTimeoutError,
    ValidationError,
)
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .users.controller import register as register_users
from .volunteers.controller import register as register_volunteers

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"

# Most specific first: StoreTimeoutError and ConflictError are PersistenceErrors.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (StoreTimeoutError, 504),
    (ConflictError, 409),
    (PersistenceError, 500),
)


def _status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = _status_for(e)
        if status >= 500:
            logger.error("request failed: %s", e, exc_info=e)
        return jsonify({"success": False, "message": str(e)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

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
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            pool_size=getattr(settings, "DB_POOL_SIZE", None),
            timeout_ms=getattr(settings, "DB_TIMEOUT_MS", None),
            qr_box_size=int(getattr(settings, "QR_BOX_SIZE", QR_DEFAULT_BOX_SIZE)),
            qr_border=int(getattr(settings, "QR_BORDER", QR_DEFAULT_BORDER)),
        )
        atexit.register(container.close)

    app.extensions["container"] = container

    _register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "OK", "message": "Volunteer attendance API is running"})

    register_users(app, container)
    register_volunteers(app, container)
    register_attendance(app, container)
    register_dashboard(app, container)

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
