from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .config import get_settings_module
from .config.engine import EngineSettings
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .leave_balances.controller import register as register_leave_balances
from .overtime.controller import register as register_overtime
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
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
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            settings=EngineSettings.from_settings(settings),
            notification_backend=getattr(settings, "NOTIFICATION_BACKEND", "database"),
        )

    app.extensions["container"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_leave_balances(app, container)
    register_overtime(app, container)
    register_requests(app, container)

    return app
