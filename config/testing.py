import os

from .config import db_config_from_env

DB_CONFIG = db_config_from_env(default_password="test-password")

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCHEDULING = {
    "default_advance_days": 7,
    "block_conflicting_shifts": True,
}
