"""
Todo list persistence (raw SQL), scoped to one signed-in user.

A `TodoPersistence` is built per request for the session's username and every
query it runs filters on that username, so rows owned by someone else are
invisible to it. Nothing is cached between calls; each method reads a fresh
snapshot from Postgres.

Lists and todos come back as plain dicts. A loaded todo list carries its
todos under the "todos" key.

Reads that need two statements (a list plus its todos, or all lists plus all
todos) issue both concurrently on separate connections. They are not wrapped
in a transaction, so a write landing between them can show up in one result
and not the other.
"""

from __future__ import annotations

import asyncio
from typing import Any

from auth import repository as auth_repository
from auth import security
from core import db


class TodoNotFoundError(LookupError):
    """
    A list or todo the request assumed to exist is missing or not owned.
    """

    def __init__(self, message: str = "Not found.") -> None:
        super().__init__(message)
        self.message = message


class TodoPersistence:
    def __init__(self, username: str | None) -> None:
        self.username = username

    async def authenticate(self, username: str, password: str) -> bool:
        """
        Check credentials for `username` (not the bound identity; sign-in
        happens before there is one).
        """
        password_hash = await auth_repository.get_password_hash(username)
        if password_hash is None:
            return False
        return security.verify_password(password, password_hash)

    async def sorted_todo_lists(self) -> list[dict[str, Any]]:
        """
        All of the user's lists with their todos attached: lists that are not
        done first, then done lists, each group in case-insensitive title order.
        """
        lists_result, todos_result = await asyncio.gather(
            db.query(
                """
                SELECT id, title, username
                FROM todolists
                WHERE username = $1
                ORDER BY lower(title) ASC
                """,
                self.username,
            ),
            db.query(
                """
                SELECT id, title, done, todolist_id, username
                FROM todos
                WHERE username = $1
                """,
                self.username,
            ),
        )

        todo_lists = lists_result.rows
        todos = todos_result.rows
        for todo_list in todo_lists:
            todo_list["todos"] = [todo for todo in todos if todo["todolist_id"] == todo_list["id"]]

        return self.partition_todo_lists(todo_lists)

    def partition_todo_lists(self, todo_lists: list[dict[str, Any]]) -> list[dict[str, Any]]:
        undone: list[dict[str, Any]] = []
        done: list[dict[str, Any]] = []
        for todo_list in todo_lists:
            if self.is_done_todo_list(todo_list):
                done.append(todo_list)
            else:
                undone.append(todo_list)
        return undone + done

    def is_done_todo_list(self, todo_list: dict[str, Any]) -> bool:
        todos = todo_list.get("todos") or []
        return len(todos) > 0 and all(todo["done"] for todo in todos)

    def has_undone_todos(self, todo_list: dict[str, Any]) -> bool:
        return any(not todo["done"] for todo in todo_list.get("todos") or [])

    def todos_info(self, todo_lists: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Per-list counts for the lists overview page, in the same order.
        """
        return [
            {
                "count_all": len(todo_list["todos"]),
                "count_done": sum(1 for todo in todo_list["todos"] if todo["done"]),
                "is_done": self.is_done_todo_list(todo_list),
            }
            for todo_list in todo_lists
        ]

    async def sorted_todos(self, todo_list: dict[str, Any]) -> list[dict[str, Any]]:
        return await db.fetch_all(
            """
            SELECT id, title, done, todolist_id, username
            FROM todos
            WHERE todolist_id = $1
              AND username = $2
            ORDER BY done ASC, lower(title) ASC
            """,
            todo_list["id"],
            self.username,
        )

    async def load_todo_list(self, todo_list_id: int) -> dict[str, Any] | None:
        list_result, todos_result = await asyncio.gather(
            db.query(
                """
                SELECT id, title, username
                FROM todolists
                WHERE id = $1
                  AND username = $2
                """,
                todo_list_id,
                self.username,
            ),
            db.query(
                """
                SELECT id, title, done, todolist_id, username
                FROM todos
                WHERE todolist_id = $1
                  AND username = $2
                """,
                todo_list_id,
                self.username,
            ),
        )

        if not list_result.rows:
            return None
        todo_list = list_result.rows[0]
        todo_list["todos"] = todos_result.rows
        return todo_list

    async def load_todo(self, todo_list_id: int, todo_id: int) -> dict[str, Any] | None:
        return await db.fetch_one(
            """
            SELECT id, title, done, todolist_id, username
            FROM todos
            WHERE todolist_id = $1
              AND id = $2
              AND username = $3
            """,
            todo_list_id,
            todo_id,
            self.username,
        )

    async def toggle_done_todo(self, todo_list_id: int, todo_id: int) -> bool:
        count = await db.execute(
            """
            UPDATE todos
            SET done = NOT done
            WHERE todolist_id = $1
              AND id = $2
              AND username = $3
            """,
            todo_list_id,
            todo_id,
            self.username,
        )
        return count > 0

    async def remove_todo(self, todo_list_id: int, todo_id: int) -> bool:
        count = await db.execute(
            """
            DELETE FROM todos
            WHERE todolist_id = $1
              AND id = $2
              AND username = $3
            """,
            todo_list_id,
            todo_id,
            self.username,
        )
        return count > 0

    async def mark_all_done(self, todo_list_id: int) -> bool:
        """
        Set done on every todo of the list. True when at least one todo
        matched, including todos that were already done.
        """
        count = await db.execute(
            """
            UPDATE todos
            SET done = true
            WHERE todolist_id = $1
              AND username = $2
            """,
            todo_list_id,
            self.username,
        )
        return count > 0

    async def add_todo(self, title: str, todo_list_id: int) -> bool:
        # The list id is taken from the user's own list, so a missing or
        # foreign list inserts nothing.
        count = await db.execute(
            """
            INSERT INTO todos (title, todolist_id, username)
            SELECT $1, l.id, l.username
            FROM todolists l
            WHERE l.id = $2
              AND l.username = $3
            """,
            title,
            todo_list_id,
            self.username,
        )
        return count > 0

    async def delete_todo_list(self, todo_list_id: int) -> bool:
        count = await db.execute(
            """
            DELETE FROM todolists
            WHERE id = $1
              AND username = $2
            """,
            todo_list_id,
            self.username,
        )
        return count > 0

    async def exists_todo_list_title(self, title: str) -> bool:
        row = await db.fetch_one(
            """
            SELECT 1 AS ok
            FROM todolists
            WHERE title = $1
              AND username = $2
            LIMIT 1
            """,
            title,
            self.username,
        )
        return row is not None

    async def create_todo_list(self, title: str) -> bool:
        """
        Insert a new list. Returns False instead of raising when the user
        already has a list with this title.
        """
        try:
            count = await db.execute(
                """
                INSERT INTO todolists (title, username)
                VALUES ($1, $2)
                """,
                title,
                self.username,
            )
        except Exception as exc:
            if self.is_unique_constraint_violation(exc):
                return False
            raise
        return count > 0

    async def set_title(self, todo_list_id: int, title: str) -> bool:
        count = await db.execute(
            """
            UPDATE todolists
            SET title = $1
            WHERE id = $2
              AND username = $3
            """,
            title,
            todo_list_id,
            self.username,
        )
        return count > 0

    def is_unique_constraint_violation(self, error: BaseException) -> bool:
        return db.is_unique_violation(error)
