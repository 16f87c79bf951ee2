"""
Recipe, meal plan and grocery list API endpoints.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from daybook.config import settings
from daybook.db.adapter import RowStore
from daybook.meals.grocery import (
    GroceryAggregator,
    GroceryRegenerationError,
    format_grocery_item,
    get_grocery_list,
    set_item_checked,
)
from daybook.meals.meal_plan import MealSlot, get_week_plan, set_meal_slot
from daybook.meals.recipes import (
    IngredientInput,
    RecipeInput,
    RecipeSaveError,
    create_recipe,
    list_recipes,
)
from daybook.tools.dates import today_in, week_start
from daybook.web.auth import AuthenticatedUser, get_current_user, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meals"])


# =============================================================================
# Models
# =============================================================================


class RecipeCreate(RecipeInput):
    ingredients: list[IngredientInput] = []
    steps: list[str] = []


class SlotUpdate(BaseModel):
    day: date
    slot: MealSlot
    recipe_id: str | None = None


class RegenerateRequest(BaseModel):
    week: date | None = None


class CheckUpdate(BaseModel):
    checked: bool


def _anchor(week: date | None) -> date:
    return week or today_in(settings.timezone).date()


def _regeneration_failed(e: GroceryRegenerationError) -> JSONResponse:
    logger.error(f"Grocery regeneration failed for week of {e.source_week}: {e}")
    return JSONResponse(
        status_code=502,
        content={"error": str(e), "indeterminate": e.indeterminate},
    )


# =============================================================================
# Recipes
# =============================================================================


@router.get("/recipes")
async def read_recipes(
    search: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """The user's recipes by title, for the slot picker."""
    return {"recipes": list_recipes(store, user.id, search)}


@router.post("/recipes")
async def create_recipe_endpoint(
    req: RecipeCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Save a recipe with its ingredients and steps."""
    try:
        recipe = create_recipe(store, user.id, req, req.ingredients, req.steps)
    except RecipeSaveError as e:
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "recipe_id": e.recipe_id},
        )

    return {"recipe": recipe}


# =============================================================================
# Meal plan
# =============================================================================


@router.get("/meal-plan")
async def read_meal_plan(
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """All slots for the week containing `week` (default: this week)."""
    anchor = _anchor(week)
    return {
        "week": week_start(anchor).isoformat(),
        "slots": get_week_plan(store, user.id, anchor),
    }


@router.put("/meal-plan/slots")
async def update_meal_slot(
    req: SlotUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Assign or clear a slot's recipe, then rebuild that week's grocery list."""
    try:
        items = set_meal_slot(store, GroceryAggregator(store), user.id, req.day, req.slot, req.recipe_id)
    except GroceryRegenerationError as e:
        return _regeneration_failed(e)

    return {"week": week_start(req.day).isoformat(), "grocery_items": items}


# =============================================================================
# Grocery list
# =============================================================================


@router.get("/grocery")
async def read_grocery_list(
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """The week's grocery list with display labels."""
    anchor = _anchor(week)
    items = get_grocery_list(store, user.id, anchor)
    return {
        "week": week_start(anchor).isoformat(),
        "items": [{**item, "label": format_grocery_item(item)} for item in items],
    }


@router.post("/grocery/regenerate")
async def regenerate_grocery_list(
    req: RegenerateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Rebuild the week's grocery list from scratch (safe to retry)."""
    anchor = _anchor(req.week)
    try:
        items = GroceryAggregator(store).regenerate(user.id, anchor)
    except GroceryRegenerationError as e:
        return _regeneration_failed(e)

    return {"week": week_start(anchor).isoformat(), "items": items}


@router.patch("/grocery/{item_id}")
async def check_grocery_item(
    item_id: str,
    req: CheckUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RowStore = Depends(get_user_store),
):
    """Check or uncheck a grocery item."""
    row = set_item_checked(store, user.id, item_id, req.checked)
    if row is None:
        raise HTTPException(status_code=404, detail="Grocery item not found")
    return {"item": row}
