from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.staff_scheduling.staff_scheduling.database.bootstrap import apply_schema, missing_tables
from src.staff_scheduling.staff_scheduling.logging_config import setup_logging

logger = logging.getLogger("init_db")


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    count = apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    missing = missing_tables(db_config)
    if missing:
        logger.error("Tables still missing after %d statements: %s", count, ", ".join(missing))
        return 1
    logger.info(
        "Schema ready on %s@%s:%s/%s",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
