from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .approvals.controller import register as register_approvals
from .container import Container, build_container
from .core.constants import DEFAULT_APP_NAME
from .database.bootstrap import apply_schema, list_tables
from .forms.controller import register as register_forms
from .notifications.controller import register as register_notifications
from .notifications.mailer import SMTPConfig
from .recap.controller import register as register_recap
from .settings.controller import register as register_settings
from .users.controller import register as register_users

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _mail_config(settings) -> SMTPConfig:
    return SMTPConfig(
        server=str(getattr(settings, "MAIL_SERVER", "localhost")),
        port=int(getattr(settings, "MAIL_PORT", 587)),
        user=str(getattr(settings, "MAIL_USER", "")),
        password=str(getattr(settings, "MAIL_PASS", "")),
        use_tls=bool(getattr(settings, "MAIL_USE_TLS", True)),
        sender_name=str(getattr(settings, "APP_NAME", DEFAULT_APP_NAME)),
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

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
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            mail_config=_mail_config(settings),
            base_url=str(getattr(settings, "BASE_URL", "")),
            app_name=str(getattr(settings, "APP_NAME", DEFAULT_APP_NAME)),
        )

    app.extensions["container"] = container

    register_approvals(app, container)
    register_forms(app, container)
    register_recap(app, container)
    register_users(app, container)
    register_settings(app, container)
    register_notifications(app, container)

    return app
