"""
Sign-in / sign-out pages.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from core.flash import flash
from core.templates import render
from todos.dependencies import get_anonymous_store
from todos.persistence import TodoPersistence

from . import session

router = APIRouter()


@router.get("/users/signin")
async def signin_form(request: Request):
    flash(request, "info", "Please sign in.")
    return render(request, "signin.html")


@router.post("/users/signin")
async def signin(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
    store: TodoPersistence = Depends(get_anonymous_store),
):
    trimmed = username.strip()
    authenticated = await store.authenticate(trimmed, password)

    if not authenticated:
        flash(request, "error", "Invalid Credentials")
        return render(request, "signin.html", {"form_username": username})

    session.sign_in(request, trimmed)
    flash(request, "info", "Welcome!")
    return RedirectResponse(url="/lists", status_code=302)


@router.post("/users/signout")
async def signout(request: Request):
    session.sign_out(request)
    return RedirectResponse(url="/users/signin", status_code=302)
