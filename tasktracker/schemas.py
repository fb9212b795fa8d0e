"""
Request structures for the JSON API.

Each endpoint that accepts a body parses it into one of the frozen
dataclasses below through its ``from_json`` constructor.  Required and
optional fields are spelled out per endpoint, unknown keys are dropped
(so protected columns such as ``id``, ``user_id`` or ``created_at`` can
never be bound from a request), and any rule violation raises
:class:`~tasktracker.errors.ValidationError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .errors import ValidationError
from .models import TaskPriority

MAX_USERNAME_LENGTH = 80
MAX_TITLE_LENGTH = 200
# Largest value a row id column can hold (signed 64-bit)
MAX_ROW_ID = 2**63 - 1

UPDATABLE_TASK_FIELDS = ("title", "description", "priority", "due_date", "completed")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _validate_title(value: Any) -> str:
    if _is_blank(value):
        raise ValidationError("Task title required")
    if len(value) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be {MAX_TITLE_LENGTH} characters or less")
    return value


def _validate_description(value: Any) -> str | None:
    if value is not None and not isinstance(value, str):
        raise ValidationError("description must be a string")
    return value


def _validate_priority(value: Any) -> str:
    valid_priorities = [p.value for p in TaskPriority]
    if value not in valid_priorities:
        raise ValidationError(f"Invalid priority. Must be one of: {valid_priorities}")
    return value


def _validate_due_date(value: Any) -> str | None:
    """Accept an ISO date or datetime string; empty and null clear the field."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError("due_date must be a date string")
    try:
        date.fromisoformat(value)
    except ValueError:
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(
                "Invalid due_date format. Use ISO format (YYYY-MM-DD)"
            ) from None
    return value


def _validate_completed(value: Any) -> bool:
    """Coerce any JSON scalar by truthiness; arrays and objects are rejected."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return bool(value)
    raise ValidationError("completed must be a boolean")


@dataclass(frozen=True)
class Credentials:
    """Body of ``POST /api/register`` and ``POST /api/login``."""

    username: str
    password: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Credentials:
        username = data.get("username")
        password = data.get("password")
        # Stored exactly as sent; only the username has to be non-blank
        if _is_blank(username) or not isinstance(password, str) or not password:
            raise ValidationError("Username and password required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"username must be {MAX_USERNAME_LENGTH} characters or less"
            )
        return cls(username=username, password=password)


# The two auth endpoints share one body shape
RegisterRequest = Credentials
LoginRequest = Credentials


@dataclass(frozen=True)
class TaskCreateRequest:
    """Body of ``POST /api/tasks``: ``title`` required, the rest optional."""

    title: str
    description: str | None = None
    priority: str = TaskPriority.MEDIUM.value
    due_date: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TaskCreateRequest:
        priority = data.get("priority")
        return cls(
            title=_validate_title(data.get("title")),
            description=_validate_description(data.get("description")),
            priority=TaskPriority.MEDIUM.value
            if priority is None
            else _validate_priority(priority),
            due_date=_validate_due_date(data.get("due_date")),
        )


_FIELD_VALIDATORS = {
    "title": _validate_title,
    "description": _validate_description,
    "priority": _validate_priority,
    "due_date": _validate_due_date,
    "completed": _validate_completed,
}


@dataclass(frozen=True)
class TaskUpdateRequest:
    """
    Body of ``PUT /api/tasks/<id>``.

    ``changes`` holds only the recognised fields the client actually sent,
    already validated and coerced, ready to be used as ``UPDATE ... SET``
    values.
    """

    changes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TaskUpdateRequest:
        changes = {
            name: _FIELD_VALIDATORS[name](data[name])
            for name in UPDATABLE_TASK_FIELDS
            if name in data
        }
        if not changes:
            raise ValidationError("Nothing to update")
        return cls(changes=changes)


@dataclass(frozen=True)
class BulkDeleteRequest:
    """Body of ``POST /api/tasks/bulk-delete``: a non-empty list of task ids."""

    ids: tuple[int, ...]

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> BulkDeleteRequest:
        ids = data.get("ids")
        if not isinstance(ids, list) or not ids:
            raise ValidationError("'ids' must be a non-empty list of task ids")
        for task_id in ids:
            if not isinstance(task_id, int) or isinstance(task_id, bool) or task_id <= 0:
                raise ValidationError("'ids' must contain positive integers only")
        # Keep request order, report each id once
        return cls(ids=tuple(dict.fromkeys(ids)))
