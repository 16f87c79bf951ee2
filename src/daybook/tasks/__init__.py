"""
Daybook - Tasks.

Brain dump parsing, task capture and the task list.
"""

from daybook.tasks.dump_parser import ParsedDump, ParsedTask, parse_dump
from daybook.tasks.models import TaskQuickAdd, validate_task_quick_add
from daybook.tasks.service import (
    BrainDumpResult,
    DumpValidationError,
    TaskSaveError,
    create_task,
    list_tasks,
    save_brain_dump,
    set_task_done,
    update_task,
    validate_dump_text,
)

__all__ = [
    "BrainDumpResult",
    "DumpValidationError",
    "ParsedDump",
    "ParsedTask",
    "TaskQuickAdd",
    "TaskSaveError",
    "create_task",
    "list_tasks",
    "parse_dump",
    "save_brain_dump",
    "set_task_done",
    "update_task",
    "validate_dump_text",
    "validate_task_quick_add",
]
