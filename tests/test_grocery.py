"""
Tests for weekly grocery list aggregation.

Tests cover:
- Pure merge rules (key normalization, first-seen display, zero -> None)
- Full regenerate pipeline against an in-memory store
- I/O ordering and error classification
- Reading, checking off and formatting items
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from conftest import InMemoryRowStore, strip_ids
from daybook.meals import grocery
from daybook.meals.grocery import (
    GroceryAggregator,
    GroceryReadError,
    GroceryRegenerationError,
    GroceryWriteError,
    aggregate_ingredients,
    format_grocery_item,
    get_grocery_list,
    set_item_checked,
    week_lock,
)

WEEK = "2025-03-10"


class TestAggregateIngredients:
    """Merge rules, no I/O."""

    def test_case_insensitive_merge_keeps_first_display(self):
        """Tomato/pcs + tomato/PCS -> one 3.5 pcs Tomato."""
        items = aggregate_ingredients(
            [
                {"name": "Tomato", "qty": 2, "unit": "pcs"},
                {"name": "tomato", "qty": 1.5, "unit": "PCS"},
            ],
            WEEK,
        )
        assert len(items) == 1
        assert items[0].name == "Tomato"
        assert items[0].qty == 3.5
        assert items[0].unit == "pcs"

    def test_null_quantities_become_none(self):
        """All-null quantities total to None, not 0."""
        items = aggregate_ingredients(
            [
                {"name": "Salt", "qty": None, "unit": "pinch"},
                {"name": "salt", "qty": None, "unit": "pinch"},
            ],
            WEEK,
        )
        assert items[0].qty is None

    def test_null_counts_as_zero_in_sum(self):
        items = aggregate_ingredients(
            [
                {"name": "Egg", "qty": None, "unit": None},
                {"name": "Egg", "qty": 3, "unit": None},
            ],
            WEEK,
        )
        assert items[0].qty == 3

    def test_different_units_stay_separate(self):
        items = aggregate_ingredients(
            [
                {"name": "Milk", "qty": 1, "unit": "cup"},
                {"name": "Milk", "qty": 1, "unit": "l"},
            ],
            WEEK,
        )
        assert [(i.name, i.unit) for i in items] == [("Milk", "cup"), ("Milk", "l")]

    def test_missing_and_empty_unit_share_key(self):
        items = aggregate_ingredients(
            [
                {"name": "Onion", "qty": 1, "unit": None},
                {"name": "onion", "qty": 2, "unit": ""},
            ],
            WEEK,
        )
        assert len(items) == 1
        assert items[0].qty == 3
        assert items[0].unit is None

    def test_names_trimmed_for_key(self):
        items = aggregate_ingredients(
            [
                {"name": "  Garlic ", "qty": 1, "unit": "clove"},
                {"name": "garlic", "qty": 2, "unit": " Clove"},
            ],
            WEEK,
        )
        assert len(items) == 1
        assert items[0].name == "  Garlic "

    def test_items_stamped_unchecked_with_week(self):
        items = aggregate_ingredients([{"name": "Rice", "qty": 2, "unit": "cups"}], WEEK)
        assert items[0].checked is False
        assert items[0].source_week == WEEK

    def test_empty_input(self):
        assert aggregate_ingredients([], WEEK) == []


class TestRegenerate:
    """Full pipeline against the in-memory store."""

    def test_aggregates_week_recipes(self, kitchen_store):
        rows = GroceryAggregator(kitchen_store).regenerate("user-1", "2025-03-12")

        by_name = {row["name"]: row for row in rows}
        assert set(by_name) == {"Tomato", "Salt", "Onion"}
        assert by_name["Tomato"]["qty"] == 3.5
        assert by_name["Tomato"]["unit"] == "pcs"
        assert by_name["Salt"]["qty"] is None
        assert by_name["Onion"]["qty"] == 1

        for row in rows:
            assert row["user_id"] == "user-1"
            assert row["source_week"] == WEEK
            assert row["checked"] is False

        assert strip_ids(kitchen_store.tables["grocerylistitems"]) == strip_ids(rows)

    def test_excludes_other_weeks_and_users(self, kitchen_store):
        rows = GroceryAggregator(kitchen_store).regenerate("user-1", "2025-03-12")
        names = {row["name"] for row in rows}
        assert "Rice" not in names  # next week
        assert "Beef" not in names  # user-2

    @pytest.mark.parametrize("anchor", ["2025-03-10", "2025-03-13", "2025-03-16"])
    def test_any_day_of_week_anchors_to_monday(self, kitchen_store, anchor):
        rows = GroceryAggregator(kitchen_store).regenerate("user-1", anchor)
        assert {row["source_week"] for row in rows} == {WEEK}

    def test_duplicate_recipes_read_once(self):
        store = MagicMock()
        store.select.side_effect = [
            [{"recipe_id": "recipe-1"}, {"recipe_id": "recipe-2"}, {"recipe_id": "recipe-1"}],
            [],
        ]
        GroceryAggregator(store).regenerate("user-1", WEEK)

        ingredient_filters = store.select.call_args_list[1].args[1]
        assert ingredient_filters[0].op == "in"
        assert ingredient_filters[0].value == ["recipe-1", "recipe-2"]

    def test_replaces_stale_items(self, kitchen_store):
        kitchen_store.tables["grocerylistitems"] = [
            {"id": "old-1", "user_id": "user-1", "source_week": WEEK, "name": "Stale", "qty": 1, "unit": None, "checked": True},
        ]
        GroceryAggregator(kitchen_store).regenerate("user-1", WEEK)

        names = {row["name"] for row in kitchen_store.tables["grocerylistitems"]}
        assert "Stale" not in names
        assert all(row["checked"] is False for row in kitchen_store.tables["grocerylistitems"])

    def test_empty_week_clears_list(self, kitchen_store):
        """No recipe slots -> list deleted, nothing inserted."""
        kitchen_store.tables["grocerylistitems"] = [
            {"id": "old-1", "user_id": "user-1", "source_week": "2025-03-24", "name": "Stale", "qty": 1, "unit": None, "checked": False},
            {"id": "keep-1", "user_id": "user-1", "source_week": WEEK, "name": "Other week", "qty": 1, "unit": None, "checked": False},
            {"id": "keep-2", "user_id": "user-2", "source_week": "2025-03-24", "name": "Other user", "qty": 1, "unit": None, "checked": False},
        ]

        rows = GroceryAggregator(kitchen_store).regenerate("user-1", "2025-03-26")

        assert rows == []
        remaining = {row["id"] for row in kitchen_store.tables["grocerylistitems"]}
        assert remaining == {"keep-1", "keep-2"}
        assert ("insert", "grocerylistitems") not in kitchen_store.calls

    def test_idempotent(self, kitchen_store):
        """Two runs without changes give the same rows."""
        aggregator = GroceryAggregator(kitchen_store)
        first = aggregator.regenerate("user-1", WEEK)
        second = aggregator.regenerate("user-1", WEEK)

        assert strip_ids(first) == strip_ids(second)
        assert len(kitchen_store.tables["grocerylistitems"]) == len(second)

    def test_io_order(self, kitchen_store):
        GroceryAggregator(kitchen_store).regenerate("user-1", WEEK)
        assert kitchen_store.calls == [
            ("select", "mealplanslots"),
            ("select", "ingredients"),
            ("delete", "grocerylistitems"),
            ("insert", "grocerylistitems"),
        ]

    def test_recipes_without_ingredients_clear_list(self):
        store = InMemoryRowStore({
            "mealplanslots": [{"user_id": "user-1", "day": WEEK, "slot": "dinner", "recipe_id": "recipe-9"}],
            "ingredients": [],
            "grocerylistitems": [{"id": "old", "user_id": "user-1", "source_week": WEEK, "name": "Stale"}],
        })
        assert GroceryAggregator(store).regenerate("user-1", WEEK) == []
        assert store.tables["grocerylistitems"] == []

    def test_concurrent_runs_leave_one_list(self, kitchen_store):
        aggregator = GroceryAggregator(kitchen_store)
        threads = [threading.Thread(target=aggregator.regenerate, args=("user-1", WEEK)) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(kitchen_store.tables["grocerylistitems"]) == 3


class TestWeekLock:
    """Per-week lock bookkeeping."""

    KEY = ("user-1", WEEK)

    def test_entry_dropped_after_release(self):
        with week_lock(*self.KEY):
            assert self.KEY in grocery._week_locks
        assert self.KEY not in grocery._week_locks

    def test_entry_dropped_after_error(self):
        with pytest.raises(RuntimeError):
            with week_lock(*self.KEY):
                raise RuntimeError("boom")
        assert self.KEY not in grocery._week_locks

    def test_map_does_not_grow_across_weeks(self, kitchen_store):
        aggregator = GroceryAggregator(kitchen_store)
        for day in ("2025-03-03", "2025-03-10", "2025-03-17", "2025-03-24"):
            aggregator.regenerate("user-1", day)
        assert grocery._week_locks == {}

    def test_waiter_keeps_entry_until_done(self):
        entered = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with week_lock(*self.KEY):
                entered.set()
                release.wait(timeout=5)
                order.append("holder")

        def waiter():
            with week_lock(*self.KEY):
                order.append("waiter")

        first = threading.Thread(target=holder)
        first.start()
        assert entered.wait(timeout=5)

        second = threading.Thread(target=waiter)
        second.start()
        deadline = time.monotonic() + 5
        while grocery._week_locks[self.KEY].users < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert grocery._week_locks[self.KEY].users == 2

        release.set()
        first.join()
        second.join()

        assert order == ["holder", "waiter"]
        assert self.KEY not in grocery._week_locks


class TestRegenerateErrors:
    """Read failures abort before writes; write failures mark the week suspect."""

    def test_slot_read_failure(self):
        store = MagicMock()
        boom = ConnectionError("network down")
        store.select.side_effect = boom

        with pytest.raises(GroceryReadError) as exc_info:
            GroceryAggregator(store).regenerate("user-1", WEEK)

        assert exc_info.value.__cause__ is boom
        assert exc_info.value.indeterminate is False
        assert exc_info.value.source_week == WEEK
        store.delete.assert_not_called()
        store.insert.assert_not_called()

    def test_ingredient_read_failure(self):
        store = MagicMock()
        store.select.side_effect = [[{"recipe_id": "recipe-1"}], RuntimeError("timeout")]

        with pytest.raises(GroceryReadError):
            GroceryAggregator(store).regenerate("user-1", WEEK)

        store.delete.assert_not_called()
        store.insert.assert_not_called()

    def test_insert_failure_is_indeterminate(self):
        store = MagicMock()
        store.select.side_effect = [
            [{"recipe_id": "recipe-1"}],
            [{"name": "Tomato", "qty": 1, "unit": None}],
        ]
        store.insert.side_effect = RuntimeError("insert rejected")

        with pytest.raises(GroceryWriteError) as exc_info:
            GroceryAggregator(store).regenerate("user-1", WEEK)

        assert exc_info.value.indeterminate is True
        store.delete.assert_called_once()

    def test_delete_failure_on_empty_week(self):
        store = MagicMock()
        store.select.return_value = []
        store.delete.side_effect = RuntimeError("delete rejected")

        with pytest.raises(GroceryWriteError):
            GroceryAggregator(store).regenerate("user-1", WEEK)

    def test_errors_share_base_class(self):
        assert issubclass(GroceryReadError, GroceryRegenerationError)
        assert issubclass(GroceryWriteError, GroceryRegenerationError)


class TestGroceryListAccess:
    """Reading, checking and formatting."""

    def test_get_grocery_list_orders_unchecked_then_name(self):
        store = InMemoryRowStore({
            "grocerylistitems": [
                {"id": "1", "user_id": "user-1", "source_week": WEEK, "name": "Onion", "checked": True},
                {"id": "2", "user_id": "user-1", "source_week": WEEK, "name": "Tomato", "checked": False},
                {"id": "3", "user_id": "user-1", "source_week": WEEK, "name": "Basil", "checked": False},
                {"id": "4", "user_id": "user-1", "source_week": "2025-03-17", "name": "Rice", "checked": False},
            ]
        })
        rows = get_grocery_list(store, "user-1", "2025-03-15")
        assert [row["name"] for row in rows] == ["Basil", "Tomato", "Onion"]

    def test_set_item_checked(self):
        store = InMemoryRowStore({
            "grocerylistitems": [{"id": "1", "user_id": "user-1", "name": "Onion", "checked": False}]
        })
        row = set_item_checked(store, "user-1", "1", True)
        assert row["checked"] is True

    def test_set_item_checked_other_user_not_found(self):
        store = InMemoryRowStore({
            "grocerylistitems": [{"id": "1", "user_id": "user-2", "name": "Onion", "checked": False}]
        })
        assert set_item_checked(store, "user-1", "1", True) is None

    @pytest.mark.parametrize(
        "item, label",
        [
            ({"name": "Tomato", "qty": 3.5, "unit": "pcs"}, "3.5 pcs Tomato"),
            ({"name": "Eggs", "qty": 2.0, "unit": None}, "2 Eggs"),
            ({"name": "Salt", "qty": None, "unit": "pinch"}, "Salt"),
            ({"name": "Pepper", "qty": 0, "unit": "tsp"}, "Pepper"),
        ],
    )
    def test_format_grocery_item(self, item, label):
        assert format_grocery_item(item) == label
