"""Schema and demo-data loading for development databases."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Union

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_DB_NAME_STATEMENTS = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


@contextmanager
def _session(db_config: Mapping[str, Any], *, with_database: bool = True) -> Iterator[Any]:
    config = DBConfig.from_mapping(db_config)
    conn = mysql.connector.connect(use_pure=True, **config.connect_kwargs(with_database=with_database))
    try:
        yield conn
    finally:
        conn.close()


def split_sql(sql: str) -> Iterator[str]:
    """Yield the statements of a SQL script.

    ``;`` ends a statement unless quoted. ``--`` and ``#`` line comments and
    ``/* */`` block comments are dropped.
    """

    buf: list[str] = []
    quote = ""
    i, n = 0, len(sql)

    while i < n:
        ch = sql[i]
        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < n:
                buf.append(sql[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            buf.append(ch)
        elif sql.startswith("--", i) or ch == "#":
            end = sql.find("\n", i)
            i = n if end < 0 else end
            continue
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end < 0 else end + 2
            continue
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: Mapping[str, Any]) -> None:
    name = DBConfig.from_mapping(db_config).database
    with _session(db_config, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    logger.debug("Database %s ready", name)


def apply_sql_file(db_config: Mapping[str, Any], *, path: PathLike) -> int:
    """Run every statement of ``path`` in one session; returns the count.

    ``CREATE DATABASE`` and ``USE`` lines are skipped so the script works
    against whatever database the config names.
    """

    sql = _DB_NAME_STATEMENTS.sub("", Path(path).read_text(encoding="utf-8"))
    count = 0
    with _session(db_config) as conn:
        cur = conn.cursor()
        for stmt in split_sql(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    logger.info("Applied %s statement(s) from %s", count, Path(path).name)
    return count


def apply_schema(db_config: Mapping[str, Any], *, schema_path: PathLike) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, path=schema_path)


def apply_seed_sql(db_config: Mapping[str, Any], *, seed_path: PathLike) -> None:
    apply_sql_file(db_config, path=seed_path)


def list_tables(db_config: Mapping[str, Any]) -> list[str]:
    with _session(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
