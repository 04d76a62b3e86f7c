from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config import get_settings_module

from .approvals.policy import ApprovalPolicy
from .container import Container, build_container
from .database.bootstrap import apply_schema, missing_tables
from .logging_config import setup_logging
from .notifications.sink import NotificationSink

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def bootstrap(*, policy: ApprovalPolicy, notifier: Optional[NotificationSink] = None) -> Container:
    """Load settings, configure logging and wire the services.

    The identity/policy provider is external and must be passed in.
    """
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    debug = bool(getattr(settings, "DEBUG", False))
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), debug=debug)

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
        missing = missing_tables(db_config)
        if missing:
            logger.error("schema incomplete, missing tables: %s", ", ".join(missing))
        else:
            logger.info("schema ready")

    return build_container(
        db_config=db_config,
        policy=policy,
        notifier=notifier,
        scheduling=getattr(settings, "SCHEDULING", None),
    )
