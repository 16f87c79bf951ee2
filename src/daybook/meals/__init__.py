"""
Daybook - Meals.

Recipes, weekly meal plan slots and the grocery list derived from them.
"""

from daybook.meals.grocery import (
    AggregatedGroceryItem,
    GroceryAggregator,
    GroceryReadError,
    GroceryRegenerationError,
    GroceryWriteError,
    aggregate_ingredients,
    format_grocery_item,
    get_grocery_list,
    set_item_checked,
)
from daybook.meals.meal_plan import MEAL_SLOTS, get_week_plan, set_meal_slot
from daybook.meals.recipes import (
    IngredientInput,
    RecipeInput,
    RecipeSaveError,
    create_recipe,
    list_recipes,
)

__all__ = [
    "AggregatedGroceryItem",
    "GroceryAggregator",
    "GroceryReadError",
    "GroceryRegenerationError",
    "GroceryWriteError",
    "IngredientInput",
    "MEAL_SLOTS",
    "RecipeInput",
    "RecipeSaveError",
    "aggregate_ingredients",
    "create_recipe",
    "format_grocery_item",
    "get_grocery_list",
    "get_week_plan",
    "list_recipes",
    "set_item_checked",
    "set_meal_slot",
]
