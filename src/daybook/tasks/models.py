"""
Task quick-add validation.

Mirrors the constraints the tasks table and the quick-add form enforce.
"""

import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class TaskQuickAdd(BaseModel):
    """A manually entered task."""

    title: str = Field(min_length=1, max_length=120)
    notes: str | None = Field(default=None, max_length=500)
    category: str | None = Field(default=None, max_length=50)
    due_date: str | None = None
    due_time: str | None = None
    alert_count: int = Field(default=0, ge=0, le=5)
    alert_offsets: list[int] = Field(default_factory=list, max_length=5)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("due_date")
    @classmethod
    def _check_date(cls, value: str | None) -> str | None:
        if value and not DATE_PATTERN.match(value):
            raise ValueError("Invalid date format (use YYYY-MM-DD)")
        return value or None

    @field_validator("due_time")
    @classmethod
    def _check_time(cls, value: str | None) -> str | None:
        if value and not TIME_PATTERN.match(value):
            raise ValueError("Invalid time format (use HH:MM)")
        return value or None

    @field_validator("alert_offsets")
    @classmethod
    def _check_offsets(cls, value: list[int]) -> list[int]:
        if any(offset < 0 for offset in value):
            raise ValueError("Alert offset cannot be negative")
        return value


def validate_task_quick_add(data: Any) -> dict[str, Any]:
    """
    Validate quick-add input and collect field errors.

    Returns:
        {"success": True, "data": TaskQuickAdd} or
        {"success": False, "errors": {field: message}, "message": "field: message; ..."}
        with only the first error reported per field.
    """
    try:
        task = TaskQuickAdd.model_validate(data)
    except ValidationError as e:
        field_errors: dict[str, str] = {}
        messages: list[str] = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            if field in field_errors:
                continue
            message = error["msg"].removeprefix("Value error, ")
            field_errors[field] = message
            messages.append(f"{field}: {message}")

        return {
            "success": False,
            "errors": field_errors,
            "message": "; ".join(messages),
        }

    return {"success": True, "data": task}
