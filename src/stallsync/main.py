from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .holidays.controller import register as register_holidays
from .payroll.controller import register as register_payroll
from .staff.controller import register as register_staff

logger = logging.getLogger(__name__)

ENGINE_SETTINGS = ("IN_QUERY_BATCH_SIZE", "WEEKEND_DAYS", "NON_WORKING_DAY_ATTENDANCE")


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["CURRENCY_SYMBOL"] = getattr(settings, "CURRENCY_SYMBOL", "")

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            conn = DatabaseConnection(DBConfig.from_mapping(db_config))
            apply_schema(conn)
            logger.info("schema ready (tables=%d)", len(list_tables(conn)))
        engine_settings = {key: getattr(settings, key) for key in ENGINE_SETTINGS if hasattr(settings, key)}
        container = build_container(db_config=db_config, settings=engine_settings)

    app.extensions["stallsync"] = container

    register_error_handlers(app)
    register_staff(app, container)
    register_holidays(app, container)
    register_attendance(app, container)
    register_payroll(app, container)

    return app
