"""
Database models for the task tracker.

Defines the SQLAlchemy models backing the API: :class:`User` holds login
credentials, :class:`Task` holds a single to-do item owned by one user.
Neither model ever serialises the password hash.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


class TaskPriority(str, Enum):
    """Enumeration of accepted task priorities."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert datetime to an ISO-8601 UTC string.

    SQLite commonly returns naive datetime values even when timezone-aware
    columns are declared. For API contracts, always normalize to UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(db.Model):
    """
    A registered account.

    Attributes:
        id: Auto-incrementing integer primary key.
        username: Unique login name (max 80 chars).
        password_hash: Salted Werkzeug hash of the password.
        created_at: Timestamp of registration, stored as UTC.
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    # Indexed because every login looks a user up by name
    username: str = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def set_password(self, password: str) -> None:
        """Hash and store a plain-text password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Return ``True`` when *password* matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """Return the public profile: ``id``, ``username`` and ``created_at``."""
        return {
            "id": self.id,
            "username": self.username,
            "created_at": to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.username}>"


class Task(db.Model):
    """
    Task model representing a to-do item.

    Attributes:
        id: Unique identifier for the task.
        user_id: Owning user; the only account allowed to see or change it.
        title: Short title, stored exactly as submitted.
        description: Optional free text.
        priority: One of :class:`TaskPriority` values.
        due_date: Optional ISO date string, stored as submitted.
        completed: Completion flag.
        created_at: Timestamp when the task was created.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: str = db.Column(db.String(200), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
    )
    due_date: str | None = db.Column(db.String(40), nullable=True)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the task to a dictionary representation.

        Returns:
            Dictionary containing all task fields.
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "due_date": self.due_date,
            "completed": bool(self.completed),
            "created_at": to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        """Return string representation of the task."""
        return f"<Task {self.id}: {self.title}>"
