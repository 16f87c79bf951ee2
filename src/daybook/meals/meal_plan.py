"""
Daybook - Meal Plan Slots.

A week has breakfast, lunch and dinner slots per day, each pointing at
one recipe. Any slot change regenerates that week's grocery list.
"""

import logging
from datetime import date, datetime
from typing import Literal

from daybook.db.adapter import RowStore, eq, gte, lte
from daybook.meals.grocery import MEAL_PLAN_TABLE, GroceryAggregator
from daybook.tools.dates import to_date, week_bounds

logger = logging.getLogger(__name__)

MealSlot = Literal["breakfast", "lunch", "dinner"]
MEAL_SLOTS: tuple[MealSlot, ...] = ("breakfast", "lunch", "dinner")


def get_week_plan(store: RowStore, user_id: str, anchor_date: str | date | datetime) -> list[dict]:
    """All slots for the week containing anchor_date, ordered by day."""
    monday, sunday = week_bounds(anchor_date)
    return store.select(
        MEAL_PLAN_TABLE,
        [
            eq("user_id", user_id),
            gte("day", monday.isoformat()),
            lte("day", sunday.isoformat()),
        ],
        order=[("day", False)],
    )


def set_meal_slot(
    store: RowStore,
    aggregator: GroceryAggregator,
    user_id: str,
    day: str | date,
    slot: MealSlot,
    recipe_id: str | None,
) -> list[dict]:
    """
    Assign, replace or clear the recipe in one slot, then rebuild groceries.

    - recipe_id None clears the slot (deletes the row if there is one)
    - an existing slot is updated in place
    - a missing slot is inserted

    Returns:
        The week's regenerated grocery rows

    Raises:
        ValueError: Unknown slot name
        GroceryRegenerationError: The grocery rebuild failed after the slot changed
    """
    if slot not in MEAL_SLOTS:
        raise ValueError(f"Unknown meal slot: {slot}")

    day_str = to_date(day).isoformat()
    slot_filters = [eq("user_id", user_id), eq("day", day_str), eq("slot", slot)]
    existing = store.select(MEAL_PLAN_TABLE, slot_filters, columns=["id"])

    if recipe_id is None:
        if existing:
            store.delete(MEAL_PLAN_TABLE, [eq("id", existing[0]["id"]), eq("user_id", user_id)])
            logger.info(f"Cleared {slot} on {day_str} for user {user_id}")
    elif existing:
        store.update(
            MEAL_PLAN_TABLE,
            [eq("id", existing[0]["id"]), eq("user_id", user_id)],
            {"recipe_id": recipe_id},
        )
    else:
        store.insert(
            MEAL_PLAN_TABLE,
            [{"user_id": user_id, "day": day_str, "slot": slot, "recipe_id": recipe_id}],
        )

    return aggregator.regenerate(user_id, day_str)
