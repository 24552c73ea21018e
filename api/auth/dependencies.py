"""
Auth dependencies for protected routes.
"""

from __future__ import annotations

from fastapi import Request

from . import session


class SignInRequired(Exception):
    """
    Raised when a protected page is requested without a signed-in session.
    `main.py` turns it into a redirect to the sign-in page.
    """


async def require_signed_in(request: Request) -> str:
    username = session.signed_in_username(request)
    if username is None:
        raise SignInRequired()
    return username
