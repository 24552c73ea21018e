"""
Cookie session helpers: settings and the signed-in identity.

The session itself is Starlette's signed-cookie `SessionMiddleware`
(configured in `main.py` from the settings below).
"""

from __future__ import annotations

import os

from fastapi import Request


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def session_secret() -> str:
    # Local default keeps development simple.
    # In production, set SESSION_SECRET in environment.
    return os.environ.get("SESSION_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def session_cookie_name() -> str:
    return os.environ.get("SESSION_COOKIE_NAME", "todos-session-id").strip() or "todos-session-id"


def session_max_age_s() -> int:
    return _env_int("SESSION_MAX_AGE_DAYS", 31) * 24 * 60 * 60


def session_https_only() -> bool:
    return os.environ.get("SESSION_HTTPS_ONLY", "").strip().lower() in ("1", "true", "yes", "on")


def signed_in_username(request: Request) -> str | None:
    if not request.session.get("signed_in"):
        return None
    username = str(request.session.get("username") or "").strip()
    return username or None


def sign_in(request: Request, username: str) -> None:
    request.session["username"] = username
    request.session["signed_in"] = True


def sign_out(request: Request) -> None:
    request.session.pop("username", None)
    request.session.pop("signed_in", None)
