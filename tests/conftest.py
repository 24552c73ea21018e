import asyncio
import os
from pathlib import Path

import asyncpg
import pytest

from auth import security
from core import db

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class RecordingDb:
    """
    Stand-in for `core.db.query`: records every statement and answers from a
    queue of prepared results (or raises a queued exception).
    """

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.results: list = []

    def returns(self, rows=None, row_count=None):
        rows = rows or []
        self.results.append(db.QueryResult(rows=rows, row_count=len(rows) if row_count is None else row_count))
        return self

    def raises(self, exc: BaseException):
        self.results.append(exc)
        return self

    async def query(self, sql: str, *args):
        self.calls.append((" ".join(sql.split()), args))
        result = self.results.pop(0) if self.results else db.QueryResult()
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture()
def fake_db(monkeypatch):
    recorder = RecordingDb()
    monkeypatch.setattr(db, "query", recorder.query)
    return recorder


USERS = {"alice": "alice-secret", "bob": "bob-secret"}


async def _reset_database(dsn: str) -> None:
    schema = (_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = await asyncpg.connect(dsn=dsn)
    try:
        await conn.execute(schema)
        await conn.execute("TRUNCATE todos, todolists, users RESTART IDENTITY CASCADE")
        for username, password in USERS.items():
            await conn.execute(
                "INSERT INTO users (username, password) VALUES ($1, $2)",
                username,
                security.hash_password(password),
            )
    finally:
        await conn.close()


@pytest.fixture()
def pg_database(monkeypatch):
    """
    Real Postgres from TEST_DATABASE_URL, reset to the schema with two users.
    Tests using it are skipped when the variable is not set.
    """
    dsn = os.environ.get("TEST_DATABASE_URL", "").strip()
    if not dsn:
        pytest.skip("TEST_DATABASE_URL is not set.")
    monkeypatch.setenv("DATABASE_URL", dsn)
    asyncio.run(_reset_database(dsn))
    return dsn
