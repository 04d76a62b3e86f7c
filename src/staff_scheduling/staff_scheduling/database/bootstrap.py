"""Schema setup for the scheduling tables.

``database/schema.sql`` is written for MySQL 8 and is safe to re-run. The
database name inside the file is ignored; the configured one is used.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_TABLES = (
    "staff_calendar_entries",
    "work_shifts",
    "schedule_requests",
    "shift_templates",
)

_DB_SCOPED = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the table-level statements of a schema file.

    Schema files hold DDL only, so ';' always ends a statement. Line
    comments are dropped, and so are CREATE DATABASE / USE statements.
    """
    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    for chunk in body.split(";"):
        stmt = chunk.strip()
        if stmt and not _DB_SCOPED.match(stmt):
            yield stmt


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Create the database and tables; return the number of statements run."""
    ensure_database_exists(db_config)
    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements from %s", len(statements), schema_path)
    return len(statements)


def missing_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        present = {str(row[0]) for row in cur.fetchall()}
    finally:
        conn.close()
    return [t for t in SCHEMA_TABLES if t not in present]
