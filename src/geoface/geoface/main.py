from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from .common.web import json_error
from .config import get_settings_module
from .core.constants import DEFAULT_MAX_CONTENT_LENGTH
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .checkin.controller import register as register_checkin
from .review.controller import register as register_review
from .settings.controller import register as register_settings
from .students.controller import register as register_students

logger = logging.getLogger("geoface")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def setup_logging(app: Flask, level: str = "INFO") -> None:
    """Route the package loggers through one stream handler."""
    root = logging.getLogger("geoface")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root.addHandler(handler)
    root.setLevel(level.upper())
    app.logger.setLevel(level.upper())


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_CONTENT_LENGTH", DEFAULT_MAX_CONTENT_LENGTH))

    setup_logging(app, getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info("Starting GeoFace with settings=%s", settings_module)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("Demo seed ready")
        container = build_container(settings)

    app.extensions["geoface"] = container

    register_checkin(app, container)
    register_review(app, container)
    register_settings(app, container)
    register_students(app, container)

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(_e):
        return json_error("Uploaded image is too large", 413)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
