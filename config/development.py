import os

from .config import db_config_from_env, scheduling_from_env

DB_CONFIG = db_config_from_env(default_password="dev-password")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, bootstrap applies database/schema.sql (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

SCHEDULING = scheduling_from_env()
