"""
Daybook - Grocery List Aggregation.

A week's grocery list is a pure function of the recipes planned for that
week: every change to a meal-plan slot triggers a full recompute that
replaces the stored list.

Pipeline (one blocking round trip per step):
1. read the week's meal-plan slots -> distinct recipe ids
2. no recipes -> clear the week's list, done
3. read all ingredients for those recipes in one batched query
4. merge rows by normalized (name, unit), summing quantities
5. delete the week's list, insert the merged rows

The delete/insert pair is not transactional. A write failure leaves the
week's list indeterminate; callers retry the whole regenerate().
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime

from pydantic import BaseModel

from daybook.db.adapter import Filter, RowStore, eq, gte, in_, lte, not_null
from daybook.tools.dates import week_bounds
from daybook.tools.normalize import format_quantity, grocery_key

logger = logging.getLogger(__name__)

MEAL_PLAN_TABLE = "mealplanslots"
INGREDIENTS_TABLE = "ingredients"
GROCERY_TABLE = "grocerylistitems"


# =============================================================================
# Errors
# =============================================================================


class GroceryRegenerationError(RuntimeError):
    """Regenerating a week's grocery list failed."""

    indeterminate: bool = False

    def __init__(self, message: str, user_id: str, source_week: str):
        super().__init__(message)
        self.user_id = user_id
        self.source_week = source_week


class GroceryReadError(GroceryRegenerationError):
    """Reading slots or ingredients failed. No writes were attempted."""


class GroceryWriteError(GroceryRegenerationError):
    """Deleting or inserting grocery rows failed. The week's list is suspect."""

    indeterminate = True


# =============================================================================
# Aggregation
# =============================================================================


class AggregatedGroceryItem(BaseModel):
    """One merged grocery line for a week."""

    name: str
    qty: float | None = None
    unit: str | None = None
    checked: bool = False
    source_week: str


def aggregate_ingredients(ingredients: list[dict], source_week: str) -> list[AggregatedGroceryItem]:
    """
    Merge ingredient rows by normalized (name, unit).

    The first row seen for a key supplies the display name and unit.
    Missing quantities count as 0, and a total of exactly 0 is stored as
    None so the list never shows "0 salt".

    Args:
        ingredients: Rows with name, qty, unit
        source_week: Monday (ISO) the list belongs to

    Returns:
        Merged items in first-seen order
    """
    grouped: dict[tuple[str, str], AggregatedGroceryItem] = {}

    for ing in ingredients:
        key = grocery_key(ing.get("name"), ing.get("unit"))
        qty = ing.get("qty") or 0

        if key in grouped:
            grouped[key].qty += qty
        else:
            grouped[key] = AggregatedGroceryItem(
                name=ing.get("name") or "",
                qty=qty,
                unit=ing.get("unit"),
                source_week=source_week,
            )

    for item in grouped.values():
        if item.qty == 0:
            item.qty = None

    return list(grouped.values())


# =============================================================================
# Per-week serialization
# =============================================================================

class _WeekLock:
    """A lock plus the number of callers holding or waiting on it."""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


_week_locks: dict[tuple[str, str], _WeekLock] = {}
_week_locks_guard = threading.Lock()


@contextmanager
def week_lock(user_id: str, source_week: str) -> Iterator[None]:
    """
    Serialize regenerations of the same (user, week) within this process.

    An entry lives only while someone holds or waits on it, so the map
    stays as small as the number of weeks being regenerated right now.
    Concurrent processes are not covered: the store still decides the
    final interleaving across workers.
    """
    key = (user_id, source_week)
    with _week_locks_guard:
        entry = _week_locks.get(key)
        if entry is None:
            entry = _week_locks[key] = _WeekLock()
        entry.users += 1

    try:
        with entry.lock:
            yield
    finally:
        with _week_locks_guard:
            entry.users -= 1
            if entry.users == 0:
                del _week_locks[key]


# =============================================================================
# Regeneration
# =============================================================================


class GroceryAggregator:
    """Rebuilds a user's weekly grocery list from the week's meal plan."""

    def __init__(self, store: RowStore):
        self.store = store

    def regenerate(self, user_id: str, anchor_date: str | date | datetime) -> list[dict]:
        """
        Replace the grocery list for the week containing anchor_date.

        Args:
            user_id: Owner; every read and write is scoped to this id
            anchor_date: Any day in the target week

        Returns:
            The inserted grocery rows (empty if no recipes are planned)

        Raises:
            GroceryReadError: A read failed before anything was written
            GroceryWriteError: A delete or insert failed; retry the full call
        """
        monday, sunday = week_bounds(anchor_date)
        source_week = monday.isoformat()

        with week_lock(user_id, source_week):
            recipe_ids = self._planned_recipe_ids(user_id, monday, sunday)

            if not recipe_ids:
                self._clear_week(user_id, source_week)
                logger.info(f"Grocery list cleared for week of {source_week} (no recipes planned)")
                return []

            ingredients = self._read_ingredients(user_id, source_week, recipe_ids)
            items = aggregate_ingredients(ingredients, source_week)

            self._clear_week(user_id, source_week)
            inserted = self._insert_items(user_id, source_week, items)

        logger.info(f"Grocery list regenerated for week of {source_week} ({len(items)} items)")
        return inserted

    def _planned_recipe_ids(self, user_id: str, monday: date, sunday: date) -> list[str]:
        try:
            slots = self.store.select(
                MEAL_PLAN_TABLE,
                [
                    eq("user_id", user_id),
                    gte("day", monday.isoformat()),
                    lte("day", sunday.isoformat()),
                    not_null("recipe_id"),
                ],
                columns=["recipe_id"],
            )
        except Exception as e:
            logger.error(f"Failed to read meal plan for week of {monday.isoformat()}: {e}")
            raise GroceryReadError("Failed to read meal plan slots", user_id, monday.isoformat()) from e

        # dict keeps first-seen order while dropping duplicates
        return list(dict.fromkeys(slot["recipe_id"] for slot in slots if slot.get("recipe_id")))

    def _read_ingredients(self, user_id: str, source_week: str, recipe_ids: list[str]) -> list[dict]:
        try:
            return self.store.select(
                INGREDIENTS_TABLE,
                [in_("recipe_id", recipe_ids)],
                columns=["name", "qty", "unit"],
            )
        except Exception as e:
            logger.error(f"Failed to read ingredients for week of {source_week}: {e}")
            raise GroceryReadError("Failed to read recipe ingredients", user_id, source_week) from e

    def _clear_week(self, user_id: str, source_week: str) -> None:
        try:
            self.store.delete(GROCERY_TABLE, _week_filters(user_id, source_week))
        except Exception as e:
            logger.error(f"Failed to clear grocery list for week of {source_week}: {e}")
            raise GroceryWriteError("Failed to clear grocery list", user_id, source_week) from e

    def _insert_items(self, user_id: str, source_week: str, items: list[AggregatedGroceryItem]) -> list[dict]:
        if not items:
            return []

        rows = [{"user_id": user_id, **item.model_dump()} for item in items]
        try:
            return self.store.insert(GROCERY_TABLE, rows)
        except Exception as e:
            logger.error(f"Failed to insert grocery list for week of {source_week}: {e}")
            raise GroceryWriteError("Failed to insert grocery list", user_id, source_week) from e


def _week_filters(user_id: str, source_week: str) -> list[Filter]:
    return [eq("user_id", user_id), eq("source_week", source_week)]


# =============================================================================
# Reading and checking off
# =============================================================================


def get_grocery_list(store: RowStore, user_id: str, anchor_date: str | date | datetime) -> list[dict]:
    """Grocery rows for the week containing anchor_date, unchecked first, then by name."""
    source_week = week_bounds(anchor_date)[0].isoformat()
    return store.select(
        GROCERY_TABLE,
        _week_filters(user_id, source_week),
        order=[("checked", False), ("name", False)],
    )


def set_item_checked(store: RowStore, user_id: str, item_id: str, checked: bool) -> dict | None:
    """Check or uncheck one grocery row. Returns the updated row, or None if not found."""
    rows = store.update(
        GROCERY_TABLE,
        [eq("id", item_id), eq("user_id", user_id)],
        {"checked": checked},
    )
    return rows[0] if rows else None


def format_grocery_item(item: dict) -> str:
    """
    Display label for a grocery row.

    Examples:
        {"name": "Tomato", "qty": 3.5, "unit": "pcs"} -> "3.5 pcs Tomato"
        {"name": "Eggs", "qty": 2, "unit": None} -> "2 Eggs"
        {"name": "Salt", "qty": None, "unit": "pinch"} -> "Salt"
    """
    qty = format_quantity(item.get("qty"))
    if not qty:
        return item.get("name") or ""
    parts = [qty, item.get("unit") or "", item.get("name") or ""]
    return " ".join(p for p in parts if p)
