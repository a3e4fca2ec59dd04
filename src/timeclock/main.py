from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .adjustments.controller import register as register_adjustments
from .breaks.controller import register as register_breaks
from .breaks.policy import BreakPolicy
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .settings import get_settings_module
from .swaps.controller import register as register_swaps
from .timeentries.controller import register as register_time_entries
from .timeoff.controller import register as register_time_off

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def break_policy_from(settings) -> BreakPolicy:
    defaults = BreakPolicy()
    return BreakPolicy(
        min_unpaid_minutes=int(getattr(settings, "MIN_UNPAID_BREAK_MINUTES", defaults.min_unpaid_minutes)),
        buffer_minutes=int(getattr(settings, "BREAK_BUFFER_MINUTES", defaults.buffer_minutes)),
        default_scheduled_minutes=int(
            getattr(settings, "DEFAULT_SCHEDULED_BREAK_MINUTES", defaults.default_scheduled_minutes)
        ),
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
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
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 10)),
            break_policy=break_policy_from(settings),
        )

    register_error_handlers(app)
    register_time_entries(app, container)
    register_breaks(app, container)
    register_swaps(app, container)
    register_time_off(app, container)
    register_adjustments(app, container)
    register_reports(app, container)

    return app
