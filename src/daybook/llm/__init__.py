"""
Daybook - LLM access.
"""

from daybook.llm.client import suggest_category

__all__ = ["suggest_category"]
