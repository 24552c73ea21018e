"""
HTML routes for todo lists and todos.

Handlers validate form input, call the per-request `TodoPersistence`, and
either redirect with a flash message or re-render the form. A `False`/`None`
answer from the store for something the route expects to exist becomes
`TodoNotFoundError`, which `main.py` turns into a 404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from core.flash import flash
from core.templates import render

from . import schemas
from .dependencies import get_store
from .persistence import TodoNotFoundError, TodoPersistence

router = APIRouter()

UNIQUE_TITLE_MESSAGE = "The list title must be unique."


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


def _flash_errors(request: Request, errors: list[str]) -> None:
    for message in errors:
        flash(request, "error", message)


async def _load_or_404(store: TodoPersistence, todo_list_id: int) -> dict:
    todo_list = await store.load_todo_list(todo_list_id)
    if todo_list is None:
        raise TodoNotFoundError()
    return todo_list


async def _render_list(request: Request, store: TodoPersistence, todo_list: dict, **context):
    todo_list["todos"] = await store.sorted_todos(todo_list)
    return render(
        request,
        "list.html",
        {
            "todo_list": todo_list,
            "is_done_todo_list": store.is_done_todo_list(todo_list),
            "has_undone_todos": store.has_undone_todos(todo_list),
            **context,
        },
    )


@router.get("/lists")
async def list_todo_lists(request: Request, store: TodoPersistence = Depends(get_store)):
    todo_lists = await store.sorted_todo_lists()
    return render(
        request,
        "lists.html",
        {
            "todo_lists": todo_lists,
            "todos_info": store.todos_info(todo_lists),
        },
    )


@router.get("/lists/new")
async def new_todo_list_form(request: Request, _: TodoPersistence = Depends(get_store)):
    return render(request, "new_list.html")


@router.post("/lists")
async def create_todo_list(
    request: Request,
    todo_list_title: str = Form(default="", alias="todoListTitle"),
    store: TodoPersistence = Depends(get_store),
):
    title, errors = schemas.validate_title(schemas.TodoListTitleForm, todo_list_title)

    if errors:
        _flash_errors(request, errors)
        return render(request, "new_list.html", {"todo_list_title": title})

    if await store.exists_todo_list_title(title):
        flash(request, "error", UNIQUE_TITLE_MESSAGE)
        return render(request, "new_list.html", {"todo_list_title": title})

    created = await store.create_todo_list(title)
    if not created:
        # Lost a race with another request creating the same title.
        flash(request, "error", UNIQUE_TITLE_MESSAGE)
        return render(request, "new_list.html", {"todo_list_title": title})

    flash(request, "success", "The todo list has been created.")
    return _redirect("/lists")


@router.get("/lists/{todo_list_id}")
async def show_todo_list(
    request: Request,
    todo_list_id: int,
    store: TodoPersistence = Depends(get_store),
):
    todo_list = await _load_or_404(store, todo_list_id)
    return await _render_list(request, store, todo_list)


@router.post("/lists/{todo_list_id}/todos/{todo_id}/toggle")
async def toggle_todo(
    request: Request,
    todo_list_id: int,
    todo_id: int,
    store: TodoPersistence = Depends(get_store),
):
    toggled = await store.toggle_done_todo(todo_list_id, todo_id)
    if not toggled:
        raise TodoNotFoundError()

    todo = await store.load_todo(todo_list_id, todo_id)
    if todo is None:
        raise TodoNotFoundError()

    if todo["done"]:
        flash(request, "success", f'"{todo["title"]}" marked done.')
    else:
        flash(request, "success", f'"{todo["title"]}" marked as NOT done!')
    return _redirect(f"/lists/{todo_list_id}")


@router.post("/lists/{todo_list_id}/todos/{todo_id}/destroy")
async def destroy_todo(
    request: Request,
    todo_list_id: int,
    todo_id: int,
    store: TodoPersistence = Depends(get_store),
):
    deleted = await store.remove_todo(todo_list_id, todo_id)
    if not deleted:
        raise TodoNotFoundError()

    flash(request, "success", "The todo has been deleted.")
    return _redirect(f"/lists/{todo_list_id}")


@router.post("/lists/{todo_list_id}/complete_all")
async def complete_all_todos(
    request: Request,
    todo_list_id: int,
    store: TodoPersistence = Depends(get_store),
):
    all_done = await store.mark_all_done(todo_list_id)
    if not all_done:
        raise TodoNotFoundError()

    flash(request, "success", "All todos have been marked as done.")
    return _redirect(f"/lists/{todo_list_id}")


@router.post("/lists/{todo_list_id}/todos")
async def create_todo(
    request: Request,
    todo_list_id: int,
    todo_title: str = Form(default="", alias="todoTitle"),
    store: TodoPersistence = Depends(get_store),
):
    todo_list = await _load_or_404(store, todo_list_id)

    title, errors = schemas.validate_title(schemas.TodoTitleForm, todo_title)
    if errors:
        _flash_errors(request, errors)
        return await _render_list(request, store, todo_list, todo_title=title)

    added = await store.add_todo(title, todo_list_id)
    if not added:
        raise TodoNotFoundError()

    flash(request, "success", "The todo has been created.")
    return _redirect(f"/lists/{todo_list_id}")


@router.get("/lists/{todo_list_id}/edit")
async def edit_todo_list_form(
    request: Request,
    todo_list_id: int,
    store: TodoPersistence = Depends(get_store),
):
    todo_list = await _load_or_404(store, todo_list_id)
    return render(request, "edit_list.html", {"todo_list": todo_list})


@router.post("/lists/{todo_list_id}/destroy")
async def destroy_todo_list(
    request: Request,
    todo_list_id: int,
    store: TodoPersistence = Depends(get_store),
):
    deleted = await store.delete_todo_list(todo_list_id)
    if not deleted:
        raise TodoNotFoundError()

    flash(request, "success", "Todo list deleted.")
    return _redirect("/lists")


@router.post("/lists/{todo_list_id}/edit")
async def rename_todo_list(
    request: Request,
    todo_list_id: int,
    todo_list_title: str = Form(default="", alias="todoListTitle"),
    store: TodoPersistence = Depends(get_store),
):
    title, errors = schemas.validate_title(schemas.TodoListTitleForm, todo_list_title)

    async def rerender_edit_list():
        todo_list = await _load_or_404(store, todo_list_id)
        return render(
            request,
            "edit_list.html",
            {"todo_list": todo_list, "todo_list_title": title},
        )

    if errors:
        _flash_errors(request, errors)
        return await rerender_edit_list()

    try:
        if await store.exists_todo_list_title(title):
            flash(request, "error", UNIQUE_TITLE_MESSAGE)
            return await rerender_edit_list()

        updated = await store.set_title(todo_list_id, title)
    except Exception as exc:
        if not store.is_unique_constraint_violation(exc):
            raise
        flash(request, "error", UNIQUE_TITLE_MESSAGE)
        return await rerender_edit_list()

    if not updated:
        raise TodoNotFoundError()

    flash(request, "success", "Todo list updated.")
    return _redirect(f"/lists/{todo_list_id}")
