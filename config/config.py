import os


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "staff_scheduling"),
    }


def scheduling_from_env() -> dict:
    return {
        # Horizon used when a template is created without advance_days
        "default_advance_days": int(os.getenv("SCHEDULING_ADVANCE_DAYS", "14")),
        # When true, a conflicting shift is only committed with an explicit override
        "block_conflicting_shifts": bool(int(os.getenv("SCHEDULING_BLOCK_CONFLICTS", "1"))),
    }
