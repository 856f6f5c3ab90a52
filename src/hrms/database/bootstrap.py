from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

# Quoted literals are matched whole so a ';' inside them never ends a statement.
_SQL_TOKEN = re.compile(
    r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|;|[^;'"]+|.""",
    re.DOTALL,
)
_CREATE_DATABASE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DATABASE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def _open(target: DBConfig, *, with_database: bool = True):
    params = target.connect_params(with_database=with_database)
    return closing(mysql.connector.connect(**params, use_pure=True))


def _prepare_script(sql: str) -> str:
    """Drop comments and any CREATE DATABASE / USE lines.

    The script is applied to whichever database ``DB_CONFIG`` names.
    """
    for pattern in (_CREATE_DATABASE, _USE_DATABASE, _LINE_COMMENT):
        sql = pattern.sub("", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterator[str]:
    current: list[str] = []
    for token in _SQL_TOKEN.findall(sql):
        if token != ";":
            current.append(token)
            continue
        statement = "".join(current).strip()
        current = []
        if statement:
            yield statement

    tail = "".join(current).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with _open(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Run every statement of ``schema_path`` against the configured database.

    The schema only uses ``CREATE TABLE IF NOT EXISTS`` and ``INSERT IGNORE``,
    so applying it on every start is safe. Returns the number of statements run.
    """
    ensure_database_exists(db_config)
    target = DBConfig.from_dict(db_config)
    script = _prepare_script(Path(schema_path).read_text(encoding="utf-8"))

    executed = 0
    with _open(target) as conn:
        cur = conn.cursor()
        for statement in iter_sql_statements(script):
            cur.execute(statement)
            executed += 1
        conn.commit()

    logger.info(
        "Applied %d schema statements to %s@%s/%s",
        executed,
        target.user,
        target.host,
        target.database,
    )
    return executed


def list_tables(db_config: dict) -> list[str]:
    with _open(DBConfig.from_dict(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
