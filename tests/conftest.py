"""
Pytest configuration and fixtures for Daybook tests.
"""

import os
from typing import Any
from unittest.mock import MagicMock

import pytest

# Set test environment before importing daybook modules
os.environ["DAYBOOK_ENV"] = "development"
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.pop("OPENAI_API_KEY", None)

from daybook.db.adapter import Filter


# ---------------------------------------------------------------------------
# InMemoryRowStore - RowStore fake for unit tests
# ---------------------------------------------------------------------------


def _matches(row: dict, f: Filter) -> bool:
    value = row.get(f.field)
    match f.op:
        case "=":
            return value == f.value
        case ">=":
            return value is not None and value >= f.value
        case "<=":
            return value is not None and value <= f.value
        case "in":
            return value in f.value
        case "not_null":
            return value is not None
    return False


class InMemoryRowStore:
    """
    Dict-of-lists RowStore.

    Records every call as (method, table) in `calls` so tests can assert
    on I/O ordering.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1

    def rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    def select(
        self,
        table: str,
        filters: list[Filter],
        columns: list[str] | None = None,
        order: list[tuple[str, bool]] | None = None,
    ) -> list[dict]:
        self.calls.append(("select", table))
        found = [row for row in self.rows(table) if all(_matches(row, f) for f in filters)]

        for column, desc in reversed(order or []):
            found.sort(key=lambda r: r.get(column), reverse=desc)

        if columns:
            return [{c: row.get(c) for c in columns} for row in found]
        return [dict(row) for row in found]

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        self.calls.append(("insert", table))
        inserted = []
        for row in rows:
            new_row = {"id": f"row-{self._next_id}", **row}
            self._next_id += 1
            self.rows(table).append(new_row)
            inserted.append(dict(new_row))
        return inserted

    def update(self, table: str, filters: list[Filter], data: dict) -> list[dict]:
        self.calls.append(("update", table))
        updated = []
        for row in self.rows(table):
            if all(_matches(row, f) for f in filters):
                row.update(data)
                updated.append(dict(row))
        return updated

    def delete(self, table: str, filters: list[Filter]) -> int:
        self.calls.append(("delete", table))
        keep = [row for row in self.rows(table) if not all(_matches(row, f) for f in filters)]
        removed = len(self.rows(table)) - len(keep)
        self.tables[table] = keep
        return removed


def strip_ids(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rows without their generated ids, for comparing regenerations."""
    return [{k: v for k, v in row.items() if k != "id"} for row in rows]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations - every builder call returns the same builder
    mock_table = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "gte", "lte", "in_", "is_", "order"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.not_ = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def sample_meal_plan_slots():
    """Week of 2025-03-10 (Mon) .. 2025-03-16 (Sun) for user-1, plus noise."""
    return [
        {"id": "slot-1", "user_id": "user-1", "day": "2025-03-10", "slot": "dinner", "recipe_id": "recipe-1"},
        {"id": "slot-2", "user_id": "user-1", "day": "2025-03-12", "slot": "lunch", "recipe_id": "recipe-2"},
        {"id": "slot-3", "user_id": "user-1", "day": "2025-03-14", "slot": "dinner", "recipe_id": "recipe-1"},
        {"id": "slot-4", "user_id": "user-1", "day": "2025-03-16", "slot": "breakfast", "recipe_id": None},
        # Next week
        {"id": "slot-5", "user_id": "user-1", "day": "2025-03-17", "slot": "dinner", "recipe_id": "recipe-3"},
        # Another user, same week
        {"id": "slot-6", "user_id": "user-2", "day": "2025-03-12", "slot": "dinner", "recipe_id": "recipe-4"},
    ]


@pytest.fixture
def sample_ingredients():
    """Ingredient rows for recipes 1-4."""
    return [
        {"id": "ing-1", "recipe_id": "recipe-1", "name": "Tomato", "qty": 2, "unit": "pcs"},
        {"id": "ing-2", "recipe_id": "recipe-1", "name": "Salt", "qty": None, "unit": "pinch"},
        {"id": "ing-3", "recipe_id": "recipe-2", "name": "tomato", "qty": 1.5, "unit": "PCS"},
        {"id": "ing-4", "recipe_id": "recipe-2", "name": "Onion", "qty": 1, "unit": None},
        {"id": "ing-5", "recipe_id": "recipe-2", "name": "salt ", "qty": None, "unit": "Pinch"},
        {"id": "ing-6", "recipe_id": "recipe-3", "name": "Rice", "qty": 2, "unit": "cups"},
        {"id": "ing-7", "recipe_id": "recipe-4", "name": "Beef", "qty": 1, "unit": "lb"},
    ]


@pytest.fixture
def kitchen_store(sample_meal_plan_slots, sample_ingredients):
    """In-memory store seeded with slots and ingredients."""
    return InMemoryRowStore({
        "mealplanslots": sample_meal_plan_slots,
        "ingredients": sample_ingredients,
        "grocerylistitems": [],
        "tasks": [],
    })
