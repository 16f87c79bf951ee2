"""
Daybook - LLM Client.

Wraps OpenAI with Instructor for structured outputs. Only used for
best-effort category suggestions: any failure falls back to a generic label.
"""

import logging

import instructor
from openai import OpenAI
from pydantic import BaseModel, Field

from daybook.config import settings

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY = "General"

# Singleton client instance
_client: instructor.Instructor | None = None


class CategorySuggestion(BaseModel):
    """A short category name for a task."""

    category: str = Field(description="1-2 word category name")


def get_client() -> instructor.Instructor:
    """
    Get the Instructor-wrapped OpenAI client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        openai_client = OpenAI(api_key=settings.openai_api_key)
        _client = instructor.from_openai(openai_client)

    return _client


def _build_category_prompt(title: str, notes: str | None) -> str:
    lines = [
        "Suggest a short category name (1-2 words) for this task:",
        f"Title: {title}",
    ]
    if notes:
        lines.append(f"Notes: {notes}")
    lines.append("")
    lines.append("Reply with only the category name.")
    return "\n".join(lines)


def suggest_category(title: str, notes: str | None = None) -> str:
    """
    Ask the model for a task category.

    Args:
        title: Task title
        notes: Optional task notes for extra context

    Returns:
        The suggested category, or "General" when the model is unavailable,
        errors out, or answers blank.
    """
    if not settings.openai_api_key:
        return FALLBACK_CATEGORY

    try:
        response = get_client().chat.completions.create(
            model=settings.category_model,
            messages=[{"role": "user", "content": _build_category_prompt(title, notes)}],
            response_model=CategorySuggestion,
            temperature=settings.category_temperature,
            max_retries=1,
        )
    except Exception as e:
        logger.warning(f"Category suggestion failed, using fallback: {e}")
        return FALLBACK_CATEGORY

    return response.category.strip() or FALLBACK_CATEGORY
