"""
Task API endpoints.

Brain dump parsing/capture, the task list (quick-add, edit, check off)
and category suggestions.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from daybook.config import settings
from daybook.db.adapter import RowStore
from daybook.llm.client import suggest_category
from daybook.tasks.dump_parser import parse_dump
from daybook.tasks.models import validate_task_quick_add
from daybook.tasks.service import (
    DumpValidationError,
    TaskSaveError,
    create_task,
    list_tasks,
    save_brain_dump,
    set_task_done,
    update_task,
    validate_dump_text,
)
from daybook.tools.dates import today_in
from daybook.web.auth import AuthenticatedUser, get_current_user, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


# =============================================================================
# Models
# =============================================================================


class CategoryRequest(BaseModel):
    title: str
    notes: str | None = None


class TaskDoneUpdate(BaseModel):
    is_done: bool


def _invalid_task(validation: dict) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": validation["message"], "errors": validation["errors"]},
    )


async def _read_text(request: Request) -> Any:
    """Pull "text" out of a JSON body; anything malformed reads as missing."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body.get("text") if isinstance(body, dict) else None


# =============================================================================
# Brain dump
# =============================================================================


@router.post("/parse-dump")
async def parse_dump_endpoint(request: Request):
    """
    Parse brain dump text into task drafts without saving them.

    400 for missing/non-string/blank text, 500 if parsing blows up.
    """
    try:
        text = validate_dump_text(await _read_text(request))
    except DumpValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        parsed = parse_dump(
            text,
            now=today_in(settings.timezone),
            default_time=settings.default_due_time,
        )
    except Exception:
        logger.exception("Error parsing dump")
        return JSONResponse(status_code=500, content={"error": "Failed to parse brain dump"})

    return parsed.model_dump()


@router.post("/brain-dump")
async def save_brain_dump_endpoint(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Parse brain dump text and insert the resulting tasks."""
    text = await _read_text(request)

    try:
        result = save_brain_dump(
            store,
            user.id,
            text,
            now=today_in(settings.timezone),
            default_time=settings.default_due_time,
        )
    except DumpValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except TaskSaveError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})

    return {"tasks": result.tasks, "summary": result.summary}


# =============================================================================
# Task list
# =============================================================================


@router.post("/tasks")
async def create_task_endpoint(
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Create one task from the quick-add form."""
    validation = validate_task_quick_add(payload)
    if not validation["success"]:
        return _invalid_task(validation)

    try:
        row = create_task(store, user.id, validation["data"])
    except TaskSaveError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"task": row}


@router.get("/tasks")
async def list_tasks_endpoint(
    is_done: bool | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """The user's tasks by due date; `is_done` narrows to open or finished ones."""
    return {"tasks": list_tasks(store, user.id, is_done=is_done)}


@router.put("/tasks/{task_id}")
async def update_task_endpoint(
    task_id: str,
    payload: Any = Body(None),
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Save an edited task (same validation as quick-add)."""
    validation = validate_task_quick_add(payload)
    if not validation["success"]:
        return _invalid_task(validation)

    try:
        row = update_task(store, user.id, task_id, validation["data"])
    except TaskSaveError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if row is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": row}


@router.patch("/tasks/{task_id}")
async def set_task_done_endpoint(
    task_id: str,
    req: TaskDoneUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Check or uncheck a task."""
    try:
        row = set_task_done(store, user.id, task_id, req.is_done)
    except TaskSaveError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if row is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": row}


# =============================================================================
# Category suggestion
# =============================================================================


@router.post("/generate-category")
async def generate_category(req: CategoryRequest):
    """Suggest a short category for a task (falls back to "General")."""
    return {"category": suggest_category(req.title, req.notes)}
