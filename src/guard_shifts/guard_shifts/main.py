from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.constants import (
    DEFAULT_APP_START_WINDOW_MINUTES,
    DEFAULT_BIOMETRIC_TOLERANCE_MINUTES,
    DEFAULT_SHIFT_STORE,
)
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .shifts.controller import register as register_shifts

logger = logging.getLogger(__name__)


def create_app(settings_module: str | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG", None)
    shift_store = getattr(settings, "SHIFT_STORE", DEFAULT_SHIFT_STORE)
    logger.info("settings=%s store=%s", settings_module, shift_store)

    if shift_store != "memory" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        shift_store=shift_store,
        biometric_tolerance_minutes=int(
            getattr(settings, "BIOMETRIC_TOLERANCE_MINUTES", DEFAULT_BIOMETRIC_TOLERANCE_MINUTES)
        ),
        app_start_window_minutes=int(getattr(settings, "APP_START_WINDOW_MINUTES", DEFAULT_APP_START_WINDOW_MINUTES)),
    )
    app.extensions["guard_shifts"] = container

    register_shifts(app, container)
    register_schedules(app, container)
    register_reports(app, container)

    return app
