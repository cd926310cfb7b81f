"""Recipes and ingredients API router.

Recipes are owned through their meal; every lookup is scoped to the caller.

Endpoints:
- GET /api/recipes - Page through recipes (filter by mealId / search)
- POST /api/recipes - Create recipe on an owned meal
- GET /api/recipes/{id} - Get recipe with ingredients and meal summary
- PUT /api/recipes/{id} - Update instructions, optionally replace ingredients
- DELETE /api/recipes/{id} - Delete recipe (cascades to ingredients)
- GET /api/recipes/{id}/ingredients - List ingredients by name
- POST /api/recipes/{id}/ingredients - Add one ingredient
- PUT /api/recipes/{id}/ingredients - Replace the whole set
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import get_current_user_id, get_db
from ..errors import failure_message
from ..schemas import (
    RecipeCreate, RecipeUpdate, RecipeResponse, RecipeSavedResponse, RecipeListResponse,
    IngredientIn, IngredientResponse, IngredientListResponse, IngredientsReplace,
    IngredientsSavedResponse, MessageResponse, PaginationOut,
)
from ..services import recipes as recipe_service
from ..settings import settings

router = APIRouter(prefix="/recipes")
logger = logging.getLogger("prepclock.recipes")


@router.get("", response_model=RecipeListResponse)
def list_recipes(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    meal_id: Optional[str] = Query(None, alias="mealId"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("retrieve recipes"):
        result = recipe_service.list_recipes(
            db, user_id, page=page, limit=limit, search=search, meal_id=meal_id
        )
        return RecipeListResponse(
            recipes=result.items,
            pagination=PaginationOut(
                page=result.page, limit=result.limit, total=result.total, pages=result.pages
            ),
        )


@router.post("", response_model=RecipeSavedResponse, status_code=201)
def create_recipe(
    payload: RecipeCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("create recipe"):
        recipe = recipe_service.create_recipe(
            db,
            user_id,
            meal_id=payload.meal_id,
            instructions=payload.instructions,
            ingredients=payload.ingredients,
        )
        return RecipeSavedResponse(message="Recipe created successfully", recipe=recipe)


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("retrieve recipe"):
        return RecipeResponse(recipe=recipe_service.get_recipe(db, user_id, recipe_id))


@router.put("/{recipe_id}", response_model=RecipeSavedResponse)
def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Update a recipe. If ingredients are provided, they replace all existing ones."""
    with failure_message("update recipe"):
        recipe = recipe_service.update_recipe(
            db,
            user_id,
            recipe_id,
            instructions=payload.instructions,
            ingredients=payload.ingredients,
        )
        return RecipeSavedResponse(message="Recipe updated successfully", recipe=recipe)


@router.delete("/{recipe_id}", response_model=MessageResponse)
def delete_recipe(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("delete recipe"):
        recipe_service.delete_recipe(db, user_id, recipe_id)
        return MessageResponse(message="Recipe deleted successfully")


# --- Ingredients ---

@router.get("/{recipe_id}/ingredients", response_model=IngredientListResponse)
def list_ingredients(
    recipe_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("retrieve ingredients"):
        return IngredientListResponse(
            ingredients=recipe_service.list_ingredients(db, user_id, recipe_id)
        )


@router.post("/{recipe_id}/ingredients", response_model=IngredientResponse, status_code=201)
def add_ingredient(
    recipe_id: str,
    payload: IngredientIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("create ingredient"):
        ingredient = recipe_service.add_ingredient(
            db, user_id, recipe_id, name=payload.name, quantity=payload.quantity
        )
        return IngredientResponse(message="Ingredient created successfully", ingredient=ingredient)


@router.put("/{recipe_id}/ingredients", response_model=IngredientsSavedResponse)
def replace_ingredients(
    recipe_id: str,
    payload: IngredientsReplace,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Replace the full ingredient set in one transaction."""
    with failure_message("update ingredients"):
        ingredients = recipe_service.replace_ingredients(
            db, user_id, recipe_id, payload.ingredients
        )
        return IngredientsSavedResponse(
            message="Ingredients updated successfully", ingredients=ingredients
        )
