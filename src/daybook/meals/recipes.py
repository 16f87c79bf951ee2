"""
Daybook - Recipes.

A recipe is three kinds of rows: the recipe itself, its ingredients (what
the grocery list aggregates) and its numbered instruction steps.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator

from daybook.db.adapter import RowStore, eq
from daybook.meals.grocery import INGREDIENTS_TABLE

logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"
INSTRUCTIONS_TABLE = "instructions"

RECIPE_LIST_COLUMNS = ["id", "title", "duration_min", "tags"]


class RecipeSaveError(RuntimeError):
    """
    Writing a recipe failed.

    recipe_id is set when the recipe row was created but its ingredients or
    instructions were not, so the caller can finish or remove it.
    """

    def __init__(self, message: str, recipe_id: str | None = None):
        super().__init__(message)
        self.recipe_id = recipe_id


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RecipeInput(BaseModel):
    """Recipe header fields."""

    title: str = Field(min_length=1, max_length=200)
    duration_min: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("duration_min", "servings", mode="before")
    @classmethod
    def _blank_number(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        # "pasta, quick" from a form field
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [t.strip() for t in value if isinstance(t, str) and t.strip()]
        return value


class IngredientInput(BaseModel):
    """One ingredient line. Lines with a blank name are skipped on save."""

    name: str = ""
    qty: float | None = None
    unit: str | None = None

    @field_validator("qty", "unit", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


def create_recipe(
    store: RowStore,
    user_id: str,
    recipe: RecipeInput,
    ingredients: list[IngredientInput],
    steps: list[str],
) -> dict:
    """
    Insert a recipe, then its ingredients, then its instructions.

    Blank ingredient names and blank steps are dropped; the remaining steps
    are numbered from 1. No tags are stored as None.

    Returns:
        The recipe row with "ingredients" and "instructions" lists attached

    Raises:
        RecipeSaveError: Any insert failed. recipe_id is set if the recipe row
            already exists.
    """
    row = {
        "user_id": user_id,
        "title": recipe.title,
        "duration_min": recipe.duration_min,
        "servings": recipe.servings,
        "tags": recipe.tags or None,
    }

    try:
        inserted = store.insert(RECIPES_TABLE, [row])
    except Exception as e:
        logger.error(f"Failed to create recipe for user {user_id}: {e}")
        raise RecipeSaveError("Failed to create recipe") from e

    if not inserted:
        raise RecipeSaveError("Recipe insert returned no row")

    saved = inserted[0]
    recipe_id = saved["id"]

    ingredient_rows = [
        {"recipe_id": recipe_id, "name": ing.name.strip(), "qty": ing.qty, "unit": ing.unit}
        for ing in ingredients
        if ing.name.strip()
    ]
    instruction_rows = [
        {"recipe_id": recipe_id, "step_no": number, "body": body}
        for number, body in enumerate((s.strip() for s in steps if s.strip()), start=1)
    ]

    saved["ingredients"] = []
    saved["instructions"] = []

    try:
        if ingredient_rows:
            saved["ingredients"] = store.insert(INGREDIENTS_TABLE, ingredient_rows)
    except Exception as e:
        logger.error(f"Failed to save ingredients for recipe {recipe_id}: {e}")
        raise RecipeSaveError("Failed to save recipe ingredients", recipe_id) from e

    try:
        if instruction_rows:
            saved["instructions"] = store.insert(INSTRUCTIONS_TABLE, instruction_rows)
    except Exception as e:
        logger.error(f"Failed to save instructions for recipe {recipe_id}: {e}")
        raise RecipeSaveError("Failed to save recipe instructions", recipe_id) from e

    logger.info(
        f"Created recipe {recipe_id} ({len(ingredient_rows)} ingredients, "
        f"{len(instruction_rows)} steps) for user {user_id}"
    )
    return saved


def list_recipes(store: RowStore, user_id: str, search: str | None = None) -> list[dict]:
    """The user's recipes ordered by title, optionally filtered by a title substring."""
    recipes = store.select(
        RECIPES_TABLE,
        [eq("user_id", user_id)],
        columns=RECIPE_LIST_COLUMNS,
        order=[("title", False)],
    )

    needle = (search or "").strip().lower()
    if not needle:
        return recipes
    return [r for r in recipes if needle in (r.get("title") or "").lower()]
