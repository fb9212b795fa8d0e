"""
Task dashboard view model.

Holds the authoritative task list fetched from the API plus purely local
view state (title query, priority and completion filters, sort key, page
size, current page, selection).  The visible page is derived by
:func:`derive_view` in three steps, filter then sort then paginate, and is
a pure function of the task list and a :class:`ViewQuery`.

Mutations are optimistic: the local list changes first, the server's
returned row replaces the local copy on success, and on failure the error
is recorded and the whole list is reloaded.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any

from .api import ApiError, ClientError, TaskApiClient

logger = logging.getLogger(__name__)

PRIORITY_FILTERS = ("All", "High", "Medium", "Low")
COMPLETION_FILTERS = ("All", "Completed", "Incomplete")
SORT_OPTIONS = {
    "created_at:desc": "Newest first",
    "created_at:asc": "Oldest first",
    "due_date:asc": "Due date ascending",
    "due_date:desc": "Due date descending",
}
PAGE_SIZES = (5, 10, 20)
DEFAULT_SORT = "created_at:desc"


@dataclass(frozen=True)
class ViewQuery:
    """Every input of the derived view besides the task list itself."""

    query: str = ""
    priority: str = "All"
    completed: str = "All"
    sort_by: str = DEFAULT_SORT
    page_size: int = PAGE_SIZES[0]
    page: int = 1


@dataclass(frozen=True)
class PageView:
    """One page of the filtered and sorted task list."""

    items: tuple[dict[str, Any], ...]
    page: int
    total_pages: int
    total: int


@dataclass(frozen=True)
class BulkDeleteResult:
    """Outcome of :meth:`Dashboard.bulk_delete`, split per task id."""

    deleted: tuple[int, ...]
    failed: tuple[int, ...]


def normalize_task(raw: dict[str, Any]) -> dict[str, Any]:
    """Fill the fields the dashboard relies on with their display defaults."""

    def _or(key: str, default: Any) -> Any:
        value = raw.get(key)
        return default if value is None else value

    return {
        **raw,
        "id": raw.get("id"),
        "title": _or("title", "(no title)"),
        "description": _or("description", ""),
        "priority": _or("priority", "Medium"),
        "due_date": raw.get("due_date"),
        "completed": bool(raw.get("completed")),
        "created_at": raw.get("created_at"),
    }


def _timestamp(value: Any) -> float | None:
    """Epoch seconds for an ISO date/datetime string, ``None`` if it does not parse."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def filter_tasks(
    tasks: list[dict[str, Any]],
    query: str = "",
    priority: str = "All",
    completed: str = "All",
) -> list[dict[str, Any]]:
    result = list(tasks)
    needle = query.strip().lower()
    if needle:
        result = [t for t in result if needle in (t.get("title") or "").lower()]
    if priority != "All":
        result = [t for t in result if (t.get("priority") or "Medium") == priority]
    if completed == "Completed":
        result = [t for t in result if t.get("completed")]
    elif completed == "Incomplete":
        result = [t for t in result if not t.get("completed")]
    return result


def sort_tasks(tasks: list[dict[str, Any]], sort_by: str = DEFAULT_SORT) -> list[dict[str, Any]]:
    """
    Sort by ``<field>:<asc|desc>``.

    Two values that both parse as dates are compared by time; anything
    else is compared as lower-cased text, with missing values as ``""``.
    The sort is stable, so ties keep their incoming order.
    """
    field, _, direction = (sort_by or DEFAULT_SORT).partition(":")
    sign = 1 if direction == "asc" else -1

    def compare(a: dict[str, Any], b: dict[str, Any]) -> int:
        va = a.get(field)
        vb = b.get(field)
        va = "" if va is None else va
        vb = "" if vb is None else vb

        ta, tb = _timestamp(va), _timestamp(vb)
        if ta is not None and tb is not None:
            return sign * ((ta > tb) - (ta < tb))

        sa, sb = str(va).lower(), str(vb).lower()
        return sign * ((sa > sb) - (sa < sb))

    return sorted(tasks, key=cmp_to_key(compare))


def paginate(tasks: list[dict[str, Any]], page: int, page_size: int) -> PageView:
    """Slice one page out of *tasks*, clamping *page* into the valid range."""
    total = len(tasks)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return PageView(
        items=tuple(tasks[start : start + page_size]),
        page=page,
        total_pages=total_pages,
        total=total,
    )


def derive_view(tasks: list[dict[str, Any]], view: ViewQuery) -> PageView:
    """Filter, sort and paginate *tasks*; no state is read or written."""
    filtered = filter_tasks(tasks, view.query, view.priority, view.completed)
    return paginate(sort_tasks(filtered, view.sort_by), view.page, view.page_size)


def _error_message(exc: ClientError, fallback: str) -> str:
    if isinstance(exc, ApiError):
        return exc.message
    return str(exc) or fallback


class Dashboard:
    """
    Task list plus view state for one authenticated session.

    Attributes:
        tasks: Normalised tasks as last loaded or locally mutated.
        view: Current :class:`ViewQuery`.
        selected: Ids picked for bulk deletion.
        error: Last error message to show inline, or ``None``.
        loading: ``True`` while the list is being fetched.
        busy: ``True`` while a delete or edit is in flight.
        editing_id: Id of the task whose title is being edited.
        editing_value: Current text of the title editor.
    """

    def __init__(self, client: TaskApiClient) -> None:
        self.client = client
        self.tasks: list[dict[str, Any]] = []
        self.view = ViewQuery()
        self.selected: set[int] = set()
        self.error: str | None = None
        self.loading = False
        self.busy = False
        self.editing_id: int | None = None
        self.editing_value = ""

    # -- derived state -------------------------------------------------

    @property
    def user(self) -> dict[str, Any] | None:
        context = self.client.context
        return context.user if context is not None else None

    def page_view(self) -> PageView:
        """Current page; the stored page number is clamped if the list shrank."""
        result = derive_view(self.tasks, self.view)
        if result.page != self.view.page:
            self.view = replace(self.view, page=result.page)
        return result

    @property
    def visible(self) -> tuple[dict[str, Any], ...]:
        return self.page_view().items

    @property
    def all_visible_selected(self) -> bool:
        visible = self.visible
        return bool(visible) and all(task["id"] in self.selected for task in visible)

    # -- view state ----------------------------------------------------

    def set_query(self, query: str) -> None:
        self.view = replace(self.view, query=query, page=1)

    def set_priority(self, priority: str) -> None:
        if priority not in PRIORITY_FILTERS:
            raise ValueError(f"priority filter must be one of {PRIORITY_FILTERS}")
        self.view = replace(self.view, priority=priority, page=1)

    def set_completed(self, completed: str) -> None:
        if completed not in COMPLETION_FILTERS:
            raise ValueError(f"completion filter must be one of {COMPLETION_FILTERS}")
        self.view = replace(self.view, completed=completed, page=1)

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_OPTIONS:
            raise ValueError(f"sort must be one of {list(SORT_OPTIONS)}")
        self.view = replace(self.view, sort_by=sort_by)

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page size must be positive")
        self.view = replace(self.view, page_size=page_size, page=1)

    def go_to_page(self, page: int) -> int:
        self.view = replace(self.view, page=page)
        return self.page_view().page

    def next_page(self) -> int:
        return self.go_to_page(self.view.page + 1)

    def prev_page(self) -> int:
        return self.go_to_page(self.view.page - 1)

    def toggle_select(self, task_id: int) -> None:
        if task_id in self.selected:
            self.selected.discard(task_id)
        else:
            self.selected.add(task_id)

    def toggle_select_all_visible(self) -> None:
        ids = [task["id"] for task in self.visible]
        if all(task_id in self.selected for task_id in ids):
            self.selected.difference_update(ids)
        else:
            self.selected.update(ids)

    def clear_error(self) -> None:
        self.error = None

    # -- server round trips --------------------------------------------

    def load(self) -> bool:
        """
        Fetch the task list, replacing local state.

        Clears the selection and returns to the first page.  On failure the
        list is emptied and the error recorded.
        """
        self.loading = True
        self.error = None
        try:
            raw = self.client.list_tasks()
        except ClientError as exc:
            logger.error("Loading tasks failed: %s", exc)
            self.error = _error_message(exc, "Failed to load tasks")
            self.tasks = []
            return False
        finally:
            self.loading = False

        self.tasks = [normalize_task(task) for task in raw if task]
        self.selected = set()
        self.view = replace(self.view, page=1)
        return True

    def _fail(self, exc: ClientError, fallback: str) -> None:
        """Resynchronise with the server, then report the mutation's error."""
        message = _error_message(exc, fallback)
        logger.error("%s: %s", fallback, exc)
        self.load()
        self.error = message

    def _find(self, task_id: int) -> dict[str, Any] | None:
        return next((task for task in self.tasks if task["id"] == task_id), None)

    def _replace(self, task_id: int, task: dict[str, Any]) -> None:
        self.tasks = [task if t["id"] == task_id else t for t in self.tasks]

    def add_task(self, title: str, **fields: Any) -> dict[str, Any] | None:
        """Create a task and append it to the list; blank titles are ignored."""
        title = (title or "").strip()
        if not title:
            return None
        self.busy = True
        try:
            created = self.client.create_task(title, **fields)
        except ClientError as exc:
            logger.error("Adding task failed: %s", exc)
            self.error = _error_message(exc, "Failed to add task")
            return None
        finally:
            self.busy = False

        task = normalize_task(created)
        self.tasks = [*self.tasks, task]
        return task

    def toggle_completed(self, task_id: int) -> bool:
        task = self._find(task_id)
        if task is None:
            return False
        new_value = not task["completed"]
        self._replace(task_id, {**task, "completed": new_value})

        try:
            returned = self.client.update_task(task_id, completed=new_value)
        except ClientError as exc:
            self._fail(exc, "Failed to update")
            return False

        if returned:
            current = self._find(task_id) or task
            self._replace(task_id, normalize_task({**current, **returned}))
        return True

    def delete(self, task_id: int) -> bool:
        if self._find(task_id) is None:
            return False
        self.busy = True
        self.tasks = [t for t in self.tasks if t["id"] != task_id]
        self.selected.discard(task_id)
        try:
            self.client.delete_task(task_id)
        except ClientError as exc:
            self._fail(exc, "Failed to delete")
            return False
        finally:
            self.busy = False
        return True

    def bulk_delete(self) -> BulkDeleteResult | None:
        """
        Delete every selected task in a single batch request.

        Selected tasks leave the list immediately.  If the server reports
        any id as not deleted, or the request itself fails, the list is
        reloaded to show the true state and the error says how many failed.

        Returns:
            The per-id outcome, or ``None`` if nothing was selected or the
            batch request failed outright.
        """
        if not self.selected:
            return None
        ids = sorted(self.selected)
        self.busy = True
        self.tasks = [t for t in self.tasks if t["id"] not in self.selected]
        try:
            results = self.client.bulk_delete(ids)
        except ClientError as exc:
            self._fail(exc, "Bulk delete failed")
            return None
        finally:
            self.busy = False

        deleted = {item["id"] for item in results if item.get("status") == "deleted"}
        outcome = BulkDeleteResult(
            deleted=tuple(i for i in ids if i in deleted),
            failed=tuple(i for i in ids if i not in deleted),
        )
        self.selected = set()
        if outcome.failed:
            self.load()
            self.error = f"Could not delete {len(outcome.failed)} of {len(ids)} selected tasks"
        return outcome

    def start_edit(self, task_id: int) -> None:
        task = self._find(task_id)
        if task is not None:
            self.editing_id = task_id
            self.editing_value = task["title"] or ""

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.editing_value = ""

    def save_edit(self) -> bool:
        """Save the title editor's value for the task being edited."""
        if self.editing_id is None:
            return False
        return self.edit_title(self.editing_id, self.editing_value)

    def edit_title(self, task_id: int, title: str) -> bool:
        title = (title or "").strip()
        if not title:
            self.error = "Title cannot be empty"
            return False
        task = self._find(task_id)
        if task is None:
            return False

        self.busy = True
        self._replace(task_id, {**task, "title": title})
        try:
            returned = self.client.update_task(task_id, title=title)
        except ClientError as exc:
            self._fail(exc, "Failed to save")
            return False
        finally:
            self.busy = False

        if returned:
            self._replace(task_id, normalize_task(returned))
        self.cancel_edit()
        return True
