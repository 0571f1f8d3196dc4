"""Schema bootstrap helpers used by ``create_app`` and ``scripts/init_db.py``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core import constants
from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quotes, dropping ``--`` comment lines."""
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    buf: list[str] = []
    quote = None
    escape = False

    for ch in "\n".join(lines):
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        elif ch == ";" and quote is None:
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = 0
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        logger.info("Applied %d schema statements to %s", count, target.describe())
    finally:
        conn.close()


def ensure_default_policy(db_config: dict) -> bool:
    """Insert the default attendance policy when the table is empty.

    Returns True when a row was created.
    """
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM attendance_policy")
        (count,) = cur.fetchone()
        if count:
            return False
        cur.execute(
            """
            INSERT INTO attendance_policy(
                work_start_time, work_end_time, grace_period_minutes, weekly_off_days,
                max_late_days_before_warning, absent_cutoff_time,
                annual_leave_per_year, sick_leave_per_year
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                constants.DEFAULT_WORK_START,
                constants.DEFAULT_WORK_END,
                constants.DEFAULT_GRACE_MINUTES,
                ",".join(str(d) for d in constants.DEFAULT_WEEKLY_OFF_DAYS),
                constants.DEFAULT_MAX_LATE_DAYS_BEFORE_WARNING,
                constants.DEFAULT_ABSENT_CUTOFF,
                constants.DEFAULT_ANNUAL_LEAVE_PER_YEAR,
                constants.DEFAULT_SICK_LEAVE_PER_YEAR,
            ),
        )
        conn.commit()
        logger.info("Seeded default attendance policy")
        return True
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
