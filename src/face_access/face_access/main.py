from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_access
from .common.clock import parse_clock_time
from .container import Container, build_container
from .core.constants import DEFAULT_AUTO_CLOSE_TIME, DEFAULT_ORG_UTC_OFFSET_HOURS
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(settings) -> None:
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format=getattr(settings, "LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s"),
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Tests pass a prebuilt `container` (in-memory repositories); otherwise one is
    built from the selected settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

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
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        auto_close = getattr(settings, "AUTO_CLOSE_TIME", None)
        container = build_container(
            db_config=db_config,
            org_utc_offset_hours=float(getattr(settings, "ORG_UTC_OFFSET_HOURS", DEFAULT_ORG_UTC_OFFSET_HOURS)),
            auto_close_time=parse_clock_time(auto_close) if auto_close else DEFAULT_AUTO_CLOSE_TIME,
            edit_auto_generated_only=bool(getattr(settings, "EDIT_AUTO_GENERATED_ONLY", False)),
        )

    register_users(app, container)
    register_access(app, container)
    register_reports(app, container)

    return app
