"""Attendance Ledger package.

Badge-scan and manual attendance for one workforce, organized by feature modules
(attendance, employees, leaves, hardware) with a thin Flask controller layer over
service/repository layers.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import fixed_zone
from .common.responses import error_response, rejected
from .container import build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .hardware.controller import register as register_hardware
from .jobs import build_scheduler
from .leaves.controller import register as register_leaves

logger = logging.getLogger(__name__)


def create_app(container=None) -> Flask:
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

    backend = getattr(settings, "STORE_BACKEND", "mysql")
    db_config = getattr(settings, "DB_CONFIG", None)
    utc_offset = int(getattr(settings, "UTC_OFFSET_HOURS", 8))
    logger.info("settings=%s store=%s", settings_module, backend)

    if container is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, backend=backend, utc_offset_hours=utc_offset)
    app.extensions["attendance_container"] = container

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_response(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s", app.name)
        return rejected("system", "SYSTEM_ERROR", str(e))

    register_attendance(app, container)
    register_hardware(app, container)
    register_leaves(app, container)

    if bool(getattr(settings, "ENABLE_SCHEDULER", False)):
        scheduler = build_scheduler(
            container.attendance_service,
            sweep_times=getattr(settings, "SWEEP_TIMES", ()),
            tz=fixed_zone(utc_offset),
        )
        scheduler.start()
        app.extensions["sweep_scheduler"] = scheduler

    return app
