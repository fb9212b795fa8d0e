"""
REST API endpoints for task management.

Every endpoint requires a Bearer token and only ever touches rows owned by
the authenticated user.  Updates and deletes put the caller's ``user_id``
in the ``WHERE`` clause of the statement itself, so a task owned by
someone else is indistinguishable from one that does not exist.

Endpoints:
    GET    /api/tasks              - List the caller's tasks, newest first
    POST   /api/tasks              - Create a task
    PUT    /api/tasks/<id>         - Partially update a task
    DELETE /api/tasks/<id>         - Delete a task
    POST   /api/tasks/bulk-delete  - Delete several tasks, one result per id
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, g, jsonify
from sqlalchemy import delete, select, update

from .. import db
from ..auth import require_auth
from ..errors import NotFoundError
from ..models import Task
from ..schemas import MAX_ROW_ID, BulkDeleteRequest, TaskCreateRequest, TaskUpdateRequest
from .auth import json_body

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _owned(task_id: int):
    """WHERE criteria matching *task_id* only when the caller owns it."""
    return (Task.id == task_id, Task.user_id == g.user_id)


def _is_storable_id(task_id: int) -> bool:
    # Larger ids cannot be bound as a SQL integer and match no row anyway
    return 0 < task_id <= MAX_ROW_ID


def _delete_owned(task_id: int) -> bool:
    if not _is_storable_id(task_id):
        return False
    result = db.session.execute(
        delete(Task).where(*_owned(task_id)).execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


# =====================================================================
# API Endpoints
# =====================================================================


@tasks_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks() -> tuple[Response, int]:
    """
    List every task of the authenticated user, newest first.

    Filtering, sorting and paging happen client-side, so the whole list is
    returned as a bare JSON array.
    """
    logger.info("GET /api/tasks - Fetching tasks for user_id=%s", g.user_id)

    stmt = (
        select(Task)
        .where(Task.user_id == g.user_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    tasks = db.session.scalars(stmt).all()
    return jsonify([task.to_dict() for task in tasks]), 200


@tasks_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    """
    Create a new task for the authenticated user.

    Request Body (JSON):
        title: Task title (required, not blank)
        description: Task description (optional)
        priority: High, Medium or Low (optional, default: Medium)
        due_date: ISO date string (optional)

    Returns:
        200 with ``message`` and the created ``task``, or 400 if the
        title is blank.
    """
    payload = TaskCreateRequest.from_json(json_body())

    task = Task(
        user_id=g.user_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        due_date=payload.due_date,
        completed=False,
    )
    db.session.add(task)
    db.session.commit()

    logger.info("Created task %s for user_id=%s", task.id, g.user_id)
    return jsonify({"message": "Task created", "task": task.to_dict()}), 200


@tasks_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int) -> tuple[Response, int]:
    """
    Apply a partial update to one of the caller's tasks.

    Only the fields present in the body (title, description, priority,
    due_date, completed) are written.  The updated row is read back in a
    second statement.

    Returns:
        200 with ``message`` and the updated ``task``; 400 if no
        recognised field was sent; 404 if the caller owns no such task.
    """
    payload = TaskUpdateRequest.from_json(json_body())
    if not _is_storable_id(task_id):
        raise NotFoundError("Task not found")

    result = db.session.execute(
        update(Task)
        .where(*_owned(task_id))
        .values(**payload.changes)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.rollback()
        raise NotFoundError("Task not found")
    db.session.commit()

    # Not atomic with the UPDATE: a concurrent delete shows up as 404 here
    task = db.session.scalar(select(Task).where(*_owned(task_id)))
    if task is None:
        raise NotFoundError("Task not found")

    logger.info("Updated task %s fields=%s", task_id, sorted(payload.changes))
    return jsonify({"message": "Task updated", "task": task.to_dict()}), 200


@tasks_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int) -> tuple[Response, int]:
    """
    Delete one of the caller's tasks.

    Returns:
        200 with ``message`` and the deleted ``id``, or 404 if the caller
        owns no such task.
    """
    if not _delete_owned(task_id):
        db.session.rollback()
        raise NotFoundError("Task not found")
    db.session.commit()

    logger.info("Deleted task %s", task_id)
    return jsonify({"message": "Task deleted", "id": task_id}), 200


@tasks_bp.route("/tasks/bulk-delete", methods=["POST"])
@require_auth
def bulk_delete_tasks() -> tuple[Response, int]:
    """
    Delete several of the caller's tasks in one request.

    Request Body (JSON):
        ids: Non-empty list of task ids.

    Each id is deleted independently with the same ownership predicate as
    the single delete.  The response lists one result per distinct id, in
    request order, with ``status`` set to ``"deleted"`` or
    ``"not_found"``, so the caller knows exactly which items went away.
    """
    payload = BulkDeleteRequest.from_json(json_body())

    results = [
        {"id": task_id, "status": "deleted" if _delete_owned(task_id) else "not_found"}
        for task_id in payload.ids
    ]
    db.session.commit()

    deleted = sum(1 for item in results if item["status"] == "deleted")
    logger.info("Bulk delete for user_id=%s: %s of %s", g.user_id, deleted, len(results))
    return (
        jsonify(
            {
                "message": f"Deleted {deleted} of {len(results)} tasks",
                "results": results,
            }
        ),
        200,
    )
