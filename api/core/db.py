"""
Async database access helpers (raw SQL) using asyncpg.

Every statement runs on its own connection: connect, execute, close. There is
no pool and no session or transaction state shared between statements, so two
statements issued for the same page (e.g. a list and its todos) are two
independent autocommit reads.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
import os
import re
import ssl
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_VIOLATION_MESSAGE = re.compile(r"duplicate key value violates unique constraint")


@dataclass(frozen=True)
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def command_timeout() -> float:
    return _env_float("DB_COMMAND_TIMEOUT", 30.0)


def ssl_mode() -> str | ssl.SSLContext:
    """
    Map DATABASE_SSL to what asyncpg.connect(ssl=...) accepts.

    - disable (default), prefer, require, verify-ca, verify-full: passed through
    - no-verify: TLS without certificate checks (hosted Postgres with self-signed certs)
    """
    mode = os.environ.get("DATABASE_SSL", "disable").strip().lower() or "disable"
    if mode != "no-verify":
        return mode
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _one_line(sql: str) -> str:
    return " ".join(sql.split())


def _row_count(status: str | None, rows: list[Any]) -> int:
    # Status tags look like "SELECT 2", "UPDATE 3", "INSERT 0 1".
    tail = (status or "").rsplit(" ", 1)[-1]
    if tail.isdigit():
        return int(tail)
    return len(rows)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def connect() -> asyncpg.Connection:
    return await asyncpg.connect(
        dsn=database_url(),
        ssl=ssl_mode(),
        command_timeout=command_timeout(),
    )


async def query(sql: str, *args: Any) -> QueryResult:
    """
    Run one statement on a fresh connection and return its rows and row count.

    The connection is closed whether or not the statement succeeds; driver
    errors propagate unchanged.
    """
    conn = await connect()
    try:
        logger.info("query statement=%s params=%r", _one_line(sql), args)
        stmt = await conn.prepare(sql)
        records = await stmt.fetch(*args)
        rows = [_record_to_dict(r) for r in records]
        return QueryResult(rows=rows, row_count=_row_count(stmt.get_statusmsg(), rows))
    finally:
        await conn.close()


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    result = await query(sql, *args)
    return result.rows[0] if result.rows else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    result = await query(sql, *args)
    return result.rows


async def execute(sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
    """
    result = await query(sql, *args)
    return result.row_count


def is_unique_violation(error: BaseException) -> bool:
    """
    True when `error` is Postgres rejecting a duplicate key.

    Prefers the driver's structured SQLSTATE; the message match only covers
    errors that were re-wrapped and lost their code.
    """
    if isinstance(error, asyncpg.exceptions.UniqueViolationError):
        return True
    if getattr(error, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    return bool(_UNIQUE_VIOLATION_MESSAGE.search(str(error)))
