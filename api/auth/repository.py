"""
Auth persistence helpers.
"""

from __future__ import annotations

from core import db


async def get_password_hash(username: str) -> str | None:
    row = await db.fetch_one(
        """
        SELECT password
        FROM users
        WHERE username = $1
        """,
        username,
    )
    if row is None:
        return None
    return str(row["password"] or "")


async def create_user(*, username: str, password_hash: str) -> bool:
    count = await db.execute(
        """
        INSERT INTO users (username, password)
        VALUES ($1, $2)
        ON CONFLICT (username) DO NOTHING
        """,
        username,
        password_hash,
    )
    return count > 0
