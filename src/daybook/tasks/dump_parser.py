"""
Daybook - Brain Dump Parser.

Turns a block of free text ("buy milk, call mom tomorrow at 5pm and
finish the report by friday") into task drafts with a best-effort due
date, due time and category.

Extraction is a set of ordered (pattern, handler) rule tables; the first
rule whose handler returns a value wins. Parsing is pure: the result
depends only on the text and the supplied "now".
"""

import re
from collections.abc import Callable
from datetime import date, datetime, timedelta

from pydantic import BaseModel, Field

from daybook.tools.dates import WEEKDAYS, next_weekday, weekday_index

DEFAULT_DUE_TIME = "20:00:00"
FALLBACK_CATEGORY = "Brain Dump"
FALLBACK_TITLE = "Brain dump"
MAX_TITLE_LENGTH = 100


class ParsedTask(BaseModel):
    """A task draft extracted from one segment of a brain dump."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    notes: str | None = None
    due_date: str  # YYYY-MM-DD
    due_time: str  # HH:MM:SS
    category: str


class ParsedDump(BaseModel):
    """Parser output: the drafts plus a human-readable summary."""

    tasks: list[ParsedTask]
    summary: str


# =============================================================================
# Segmentation
# =============================================================================

SEGMENT_SPLIT = re.compile(r"[,;]|\band\b", re.IGNORECASE)


def split_segments(text: str) -> list[str]:
    """Split on commas, semicolons and the standalone word "and"."""
    return [piece.strip() for piece in SEGMENT_SPLIT.split(text) if piece.strip()]


# =============================================================================
# Time extraction
# =============================================================================


def _meridiem_time(match: re.Match) -> str | None:
    hour = int(match.group("hour"))
    minute = match.groupdict().get("minute") or "00"
    meridiem = match.group("meridiem").lower()

    if not 1 <= hour <= 12 or int(minute) > 59:
        return None

    if meridiem == "pm" and hour < 12:
        hour += 12
    if meridiem == "am" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minute}:00"


def _clock_time(match: re.Match) -> str | None:
    hour = int(match.group("hour"))
    minute = match.group("minute")

    if hour > 23 or int(minute) > 59:
        return None

    # Bare 1:00-7:59 is read as afternoon/evening ("3:30" -> 15:30)
    if 1 <= hour <= 7:
        hour += 12

    return f"{hour:02d}:{minute}:00"


# re.ASCII keeps \d to 0-9 so minutes always render as ASCII HH:MM:SS
TIME_RULES: list[tuple[re.Pattern, Callable[[re.Match], str | None]]] = [
    # "at 3pm", "at 3:30pm", "@3pm"
    (
        re.compile(
            r"(?:\bat|@)\s*(?P<hour>\d{1,2}):?(?P<minute>\d{2})?\s*(?P<meridiem>am|pm)\b",
            re.IGNORECASE | re.ASCII,
        ),
        _meridiem_time,
    ),
    # "3pm", "10 am", "3:30pm"
    (
        re.compile(
            r"\b(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm)\b",
            re.IGNORECASE | re.ASCII,
        ),
        _meridiem_time,
    ),
    # "15:00", "3:30"
    (re.compile(r"\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\b", re.ASCII), _clock_time),
]


def extract_time(text: str) -> str | None:
    """
    Extract a due time as HH:MM:SS.

    Rules are tried in priority order. A handler may reject an impossible
    time ("at 45pm"), in which case the next rule is tried.

    Examples:
        extract_time("meeting at 3:30pm") -> "15:30:00"
        extract_time("call at 9:00") -> "09:00:00"
        extract_time("buy milk") -> None
    """
    for pattern, handler in TIME_RULES:
        for match in pattern.finditer(text):
            result = handler(match)
            if result is not None:
                return result
    return None


# =============================================================================
# Date extraction
# =============================================================================

_WEEKDAY_ALT = "|".join(WEEKDAYS)

DATE_RULES: list[tuple[re.Pattern, Callable[[re.Match, date], date]]] = [
    (re.compile(r"today", re.IGNORECASE), lambda m, today: today),
    (re.compile(r"tomorrow", re.IGNORECASE), lambda m, today: today + timedelta(days=1)),
    (
        re.compile(rf"\b(?:(?:by|on)\s+)?(?P<day>{_WEEKDAY_ALT})\b", re.IGNORECASE),
        lambda m, today: next_weekday(today, weekday_index(m.group("day"))),
    ),
    (re.compile(r"next\s+week", re.IGNORECASE), lambda m, today: today + timedelta(days=7)),
    (re.compile(r"weekend", re.IGNORECASE), lambda m, today: next_weekday(today, 5)),
]


def extract_date(text: str, today: date) -> str | None:
    """
    Extract a due date as YYYY-MM-DD relative to today.

    Relative words match anywhere in the text ("tomorrows standup"); weekday
    names must be whole words. Weekday names always resolve to a future
    day: "wednesday" said on a Wednesday means a week from today.
    """
    for pattern, handler in DATE_RULES:
        match = pattern.search(text)
        if match:
            return handler(match, today).isoformat()
    return None


# =============================================================================
# Title cleanup
# =============================================================================

TITLE_STRIP_PATTERNS = [
    re.compile(rf"\b(?:by|on)\s+(?:{_WEEKDAY_ALT})\b", re.IGNORECASE),
    re.compile(r"(?:\bat|@)\s*\d{1,2}(?::?\d{2})?\s*(?:am|pm)?\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\btomorrow\b", re.IGNORECASE),
    re.compile(r"\btoday\b", re.IGNORECASE),
    re.compile(rf"\b(?:{_WEEKDAY_ALT})\b", re.IGNORECASE),
    re.compile(r"\bnext\s+week\b", re.IGNORECASE),
]


def clean_title(segment: str) -> str:
    """
    Strip scheduling phrases from a segment and tidy it into a title.

    Examples:
        clean_title("call mom tomorrow at 5pm") -> "Call mom"
        clean_title("submit report by friday") -> "Submit report"
    """
    title = segment
    for pattern in TITLE_STRIP_PATTERNS:
        title = pattern.sub(" ", title)

    title = " ".join(title.split())
    if not title:
        # Segment was nothing but a date/time ("tomorrow at 5pm")
        title = segment.strip()

    title = title[:1].upper() + title[1:]
    return title[:MAX_TITLE_LENGTH]


# =============================================================================
# Category guess
# =============================================================================

CATEGORY_KEYWORDS: list[tuple[str, list[str]]] = [
    ("Meals", ["groceries", "grocery", "food", "cook", "meal", "dinner", "lunch", "breakfast", "eat"]),
    ("Fitness", ["gym", "workout", "exercise", "run", "jog", "fitness", "yoga", "sport"]),
    ("Work", ["work", "project", "meeting", "deadline", "client", "email", "presentation"]),
    ("Personal", ["call", "text", "mom", "dad", "family", "friend", "visit", "birthday"]),
    ("Shopping", ["shop", "buy", "purchase", "order", "get", "pick up"]),
    ("Learning", ["study", "learn", "read", "course", "book", "homework"]),
    ("Health", ["doctor", "dentist", "appointment", "checkup", "medicine"]),
    ("Home", ["clean", "laundry", "dishes", "vacuum", "organize"]),
]

CATEGORY_RULES: list[tuple[str, re.Pattern]] = [
    (
        label,
        re.compile(
            r"\b(?:" + "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in words) + r")\b",
            re.IGNORECASE,
        ),
    )
    for label, words in CATEGORY_KEYWORDS
]


def guess_category(segment: str) -> str:
    """
    Pick a category by keyword, first matching group wins.

    Examples:
        guess_category("buy groceries") -> "Meals"
        guess_category("go to the gym") -> "Fitness"
        guess_category("think about life") -> "Brain Dump"
    """
    for label, pattern in CATEGORY_RULES:
        if pattern.search(segment):
            return label
    return FALLBACK_CATEGORY


# =============================================================================
# Entry point
# =============================================================================


def _today(now: datetime | date | None) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def parse_segment(segment: str, today: date, default_time: str = DEFAULT_DUE_TIME) -> ParsedTask:
    """Build one task draft from one segment."""
    return ParsedTask(
        title=clean_title(segment),
        notes=None,
        due_date=extract_date(segment, today) or today.isoformat(),
        due_time=extract_time(segment) or default_time,
        category=guess_category(segment),
    )


def parse_dump(
    text: str,
    now: datetime | date | None = None,
    default_time: str = DEFAULT_DUE_TIME,
) -> ParsedDump:
    """
    Parse a brain dump into task drafts.

    Args:
        text: Free text; the caller rejects blank input beforehand
        now: Reference time for relative dates (defaults to the local date)
        default_time: Due time used when a segment names none

    Returns:
        ParsedDump with one task per segment. Never raises for string input:
        unparsable text degrades to a single low-information task.
    """
    today = _today(now)
    segments = split_segments(text)

    if not segments:
        return ParsedDump(
            tasks=[
                ParsedTask(
                    title=text.strip()[:MAX_TITLE_LENGTH] or FALLBACK_TITLE,
                    notes=None,
                    due_date=today.isoformat(),
                    due_time=default_time,
                    category=FALLBACK_CATEGORY,
                )
            ],
            summary="Extracted 1 task",
        )

    tasks = [parse_segment(segment, today, default_time) for segment in segments]
    return ParsedDump(
        tasks=tasks,
        summary=f"Extracted {len(tasks)} task(s) from your brain dump",
    )
