"""
Per-request persistence handles.
"""

from __future__ import annotations

from fastapi import Depends

from auth import dependencies as auth_dependencies

from .persistence import TodoPersistence


async def get_store(username: str = Depends(auth_dependencies.require_signed_in)) -> TodoPersistence:
    return TodoPersistence(username)


async def get_anonymous_store() -> TodoPersistence:
    """
    Store with no bound identity, for sign-in. Its scoped queries match nothing.
    """
    return TodoPersistence(None)
