from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .complaints.controller import register as register_complaints
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .hostels.controller import register as register_hostels
from .identity.controller import register as register_identity
from .leaves.controller import register as register_leaves
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting with settings=%s store=%s", settings_module, getattr(settings, "STORE_BACKEND", "mysql"))

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)) and getattr(settings, "STORE_BACKEND", "mysql") == "mysql":
            db_config = getattr(settings, "DB_CONFIG")
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(settings=settings)
        container.notification_worker.start()

    app.extensions["hostel_core"] = container
    register_error_handlers(app)

    register_identity(app, container)
    register_hostels(app, container)
    register_users(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_complaints(app, container)

    return app
