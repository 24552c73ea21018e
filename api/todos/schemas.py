"""
Form schemas for todo list and todo titles.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError

TITLE_MAX_LENGTH = 100


class TodoListTitleForm(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)


class TodoTitleForm(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)


# Messages per schema: (empty title, title too long).
_MESSAGES: dict[type[BaseModel], tuple[str, str]] = {
    TodoListTitleForm: (
        "The list title is required.",
        "List title must be between 1 and 100 characters.",
    ),
    TodoTitleForm: (
        "The todo title is required.",
        "Todo title must be between 1 and 100 characters.",
    ),
}


def validate_title(schema: type[BaseModel], raw_title: str | None) -> tuple[str, list[str]]:
    """
    Trim and validate a submitted title.

    Returns the trimmed title and a list of user-facing error messages
    (empty when the title is valid).
    """
    title = (raw_title or "").strip()
    required_msg, length_msg = _MESSAGES[schema]
    try:
        schema(title=title)
    except ValidationError as exc:
        errors: list[str] = []
        for error in exc.errors():
            if error.get("type") == "string_too_short":
                errors.append(required_msg)
            else:
                errors.append(length_msg)
        return title, errors
    return title, []
