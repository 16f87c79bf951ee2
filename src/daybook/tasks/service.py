"""
Daybook - Task capture.

Brain dump flow: validate the text, parse it, bulk insert the drafts.
Plus the plain task list: quick-add, edit, list and check off.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from daybook.db.adapter import RowStore, eq
from daybook.tasks.dump_parser import DEFAULT_DUE_TIME, parse_dump
from daybook.tasks.models import TaskQuickAdd

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"

# Fields the task form always writes on edit; alerts only when sent
TASK_FORM_FIELDS = {"title", "notes", "category", "due_date", "due_time"}


class DumpValidationError(ValueError):
    """Brain dump text is missing, not a string, or blank."""


class TaskSaveError(RuntimeError):
    """Inserting tasks into the row store failed."""


@dataclass
class BrainDumpResult:
    """Rows inserted for one brain dump, plus the parser's summary."""

    tasks: list[dict] = field(default_factory=list)
    summary: str = ""


def validate_dump_text(value: Any) -> str:
    """
    Check brain dump input before parsing.

    Raises:
        DumpValidationError: If value is not a non-blank string.
    """
    if not isinstance(value, str) or not value.strip():
        raise DumpValidationError("Text is required")
    return value


def save_brain_dump(
    store: RowStore,
    user_id: str,
    text: Any,
    now: datetime | date | None = None,
    default_time: str = DEFAULT_DUE_TIME,
) -> BrainDumpResult:
    """
    Parse a brain dump and insert one task per extracted draft.

    Args:
        store: Row store scoped to the user
        user_id: Owner of the new tasks
        text: Raw brain dump text
        now: Reference time for relative dates
        default_time: Due time for drafts that name none

    Returns:
        BrainDumpResult with the inserted rows and the parser summary

    Raises:
        DumpValidationError: Blank or non-string text
        TaskSaveError: The insert failed; nothing was saved
    """
    text = validate_dump_text(text)
    parsed = parse_dump(text, now=now, default_time=default_time)

    rows = [
        {**task.model_dump(), "user_id": user_id, "is_done": False}
        for task in parsed.tasks
    ]

    try:
        inserted = store.insert(TASKS_TABLE, rows)
    except Exception as e:
        logger.error(f"Failed to save brain dump for user {user_id}: {e}")
        raise TaskSaveError("Failed to save brain dump") from e

    logger.info(f"Saved {len(rows)} brain dump task(s) for user {user_id}")
    return BrainDumpResult(tasks=inserted, summary=parsed.summary)


def create_task(store: RowStore, user_id: str, task: TaskQuickAdd) -> dict:
    """
    Insert one validated quick-add task.

    Raises:
        TaskSaveError: The insert failed
    """
    row = {**task.model_dump(), "user_id": user_id, "is_done": False}

    try:
        inserted = store.insert(TASKS_TABLE, [row])
    except Exception as e:
        logger.error(f"Failed to create task for user {user_id}: {e}")
        raise TaskSaveError("Failed to create task") from e

    return inserted[0] if inserted else row


def update_task(store: RowStore, user_id: str, task_id: str, task: TaskQuickAdd) -> dict | None:
    """
    Overwrite an existing task's form fields.

    Returns:
        The updated row, or None if the user has no task with that id

    Raises:
        TaskSaveError: The update failed
    """
    data = task.model_dump(include=TASK_FORM_FIELDS | task.model_fields_set)

    try:
        rows = store.update(TASKS_TABLE, [eq("id", task_id), eq("user_id", user_id)], data)
    except Exception as e:
        logger.error(f"Failed to update task {task_id}: {e}")
        raise TaskSaveError("Failed to update task") from e

    return rows[0] if rows else None


def set_task_done(store: RowStore, user_id: str, task_id: str, is_done: bool) -> dict | None:
    """Check or uncheck a task. Returns the updated row, or None if not found."""
    try:
        rows = store.update(
            TASKS_TABLE,
            [eq("id", task_id), eq("user_id", user_id)],
            {"is_done": is_done},
        )
    except Exception as e:
        logger.error(f"Failed to set is_done on task {task_id}: {e}")
        raise TaskSaveError("Failed to update task") from e

    return rows[0] if rows else None


def list_tasks(store: RowStore, user_id: str, is_done: bool | None = None) -> list[dict]:
    """
    The user's tasks, earliest due date first.

    Args:
        is_done: Only open (False) or only finished (True) tasks; None for all
    """
    filters = [eq("user_id", user_id)]
    if is_done is not None:
        filters.append(eq("is_done", is_done))
    return store.select(TASKS_TABLE, filters, order=[("due_date", False)])
