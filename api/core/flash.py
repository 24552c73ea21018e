"""
Flash messages kept in the cookie session until the next rendered page.
"""

from __future__ import annotations

from fastapi import Request

FLASH_KEY = "flash"


def flash(request: Request, category: str, message: str) -> None:
    messages = request.session.setdefault(FLASH_KEY, {})
    messages.setdefault(category, []).append(message)
    request.session[FLASH_KEY] = messages


def pop_flash(request: Request) -> dict[str, list[str]]:
    return request.session.pop(FLASH_KEY, None) or {}
