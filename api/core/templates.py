"""
Shared Jinja2 template rendering for the HTML pages.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from . import flash

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, name: str, context: dict[str, Any] | None = None, *, status_code: int = 200):
    """
    Render a page. Pending flash messages are consumed here, whether they
    were set earlier in this request or before a redirect.
    """
    page_context = {
        "username": request.session.get("username"),
        "signed_in": bool(request.session.get("signed_in")),
        "flash": flash.pop_flash(request),
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)
