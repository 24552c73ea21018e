"""
Password hashing for user accounts (bcrypt).

Only verification runs inside the app; hashing is used when seeding users.
"""

from __future__ import annotations

import os

import bcrypt


class AuthSecurityError(RuntimeError):
    pass


def bcrypt_rounds() -> int:
    raw = os.environ.get("BCRYPT_ROUNDS", "").strip()
    try:
        rounds = int(raw) if raw else 12
    except ValueError:
        rounds = 12
    # bcrypt only accepts cost factors 4..31.
    return max(4, min(rounds, 31))


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Constant-time check of `plain_password` against a stored bcrypt hash.
    Malformed or empty hashes count as a mismatch.
    """
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False
