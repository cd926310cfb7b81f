import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session, Query, contains_eager, selectinload

from ..db import unit_of_work
from ..errors import NotFound, require_text
from ..models import Meal, Recipe, Ingredient
from ..schemas import IngredientIn, RecipeIn
from .ownership import scoped
from .pagination import LIKE_ESCAPE, Page, contains_pattern, paginate

logger = logging.getLogger("prepclock.recipes")

INGREDIENT_REQUIRED = "Name and quantity are required and must be strings"
INSTRUCTIONS_REQUIRED = "Instructions are required and must be a string"


def build_ingredient(name: Optional[str], quantity: Optional[str]) -> Ingredient:
    return Ingredient(
        name=require_text(name, INGREDIENT_REQUIRED),
        quantity=require_text(quantity, INGREDIENT_REQUIRED),
    )


def build_ingredients(items: Optional[Sequence[IngredientIn]]) -> list[Ingredient]:
    return [build_ingredient(i.name, i.quantity) for i in (items or [])]


def build_recipe(draft: RecipeIn) -> Recipe:
    """Unsaved recipe (with ingredients) from a nested meal payload."""
    recipe = Recipe(instructions=require_text(draft.instructions, INSTRUCTIONS_REQUIRED))
    recipe.ingredients = build_ingredients(draft.ingredients)
    return recipe


def _recipes_for(db: Session, user_id: str) -> Query:
    return (
        scoped(db, Recipe, user_id)
        .options(contains_eager(Recipe.meal), selectinload(Recipe.ingredients))
    )


def list_recipes(
    db: Session,
    user_id: str,
    *,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    meal_id: Optional[str] = None,
) -> Page:
    query = _recipes_for(db, user_id)
    if meal_id:
        query = query.filter(Recipe.meal_id == meal_id)
    if search:
        query = query.filter(
            Recipe.instructions.ilike(contains_pattern(search), escape=LIKE_ESCAPE)
        )
    return paginate(query.order_by(Recipe.created_at.desc()), page, limit)


def get_recipe(db: Session, user_id: str, recipe_id: str) -> Recipe:
    recipe = _recipes_for(db, user_id).filter(Recipe.id == recipe_id).first()
    if not recipe:
        raise NotFound("Recipe not found")
    return recipe


def create_recipe(
    db: Session,
    user_id: str,
    *,
    meal_id: str,
    instructions: str,
    ingredients: Optional[Sequence[IngredientIn]] = None,
) -> Recipe:
    """Attach a new recipe to one of the caller's meals."""
    instructions = require_text(instructions, "Meal ID and instructions are required")
    new_ingredients = build_ingredients(ingredients)

    meal = scoped(db, Meal, user_id).filter(Meal.id == meal_id).first()
    if not meal:
        raise NotFound("Meal not found")

    recipe = Recipe(meal_id=meal.id, instructions=instructions, ingredients=new_ingredients)
    with unit_of_work(db):
        db.add(recipe)

    logger.info(f"Created recipe {recipe.id} for meal {meal_id}")
    return get_recipe(db, user_id, recipe.id)


def update_recipe(
    db: Session,
    user_id: str,
    recipe_id: str,
    *,
    instructions: str,
    ingredients: Optional[Sequence[IngredientIn]] = None,
) -> Recipe:
    """Update instructions. If ingredients are provided, they replace the existing set."""
    recipe = get_recipe(db, user_id, recipe_id)
    instructions = require_text(instructions, INSTRUCTIONS_REQUIRED)
    new_ingredients = build_ingredients(ingredients) if ingredients is not None else None

    with unit_of_work(db):
        recipe.instructions = instructions
        if new_ingredients is not None:
            # delete-orphan cascade removes the previous ingredients on flush
            recipe.ingredients = new_ingredients

    return get_recipe(db, user_id, recipe_id)


def delete_recipe(db: Session, user_id: str, recipe_id: str) -> None:
    recipe = get_recipe(db, user_id, recipe_id)
    with unit_of_work(db):
        db.delete(recipe)
    logger.info(f"Deleted recipe {recipe_id}")


# --- Ingredients ---

def list_ingredients(db: Session, user_id: str, recipe_id: str) -> list[Ingredient]:
    recipe = get_recipe(db, user_id, recipe_id)
    return (
        db.query(Ingredient)
        .filter(Ingredient.recipe_id == recipe.id)
        .order_by(Ingredient.name.asc())
        .all()
    )


def add_ingredient(
    db: Session, user_id: str, recipe_id: str, *, name: str, quantity: str
) -> Ingredient:
    ingredient = build_ingredient(name, quantity)
    recipe = get_recipe(db, user_id, recipe_id)
    ingredient.recipe_id = recipe.id
    with unit_of_work(db):
        db.add(ingredient)
    db.refresh(ingredient)
    return ingredient


def _usable_pair(item: Any) -> Optional[tuple[str, str]]:
    if not isinstance(item, Mapping):
        return None
    name, quantity = item.get("name"), item.get("quantity")
    if not isinstance(name, str) or not isinstance(quantity, str):
        return None
    name, quantity = name.strip(), quantity.strip()
    if not name or not quantity:
        return None
    return name, quantity


def replace_ingredients(
    db: Session, user_id: str, recipe_id: str, items: Sequence[Any]
) -> list[Ingredient]:
    """Swap the whole ingredient set of a recipe in one transaction.

    Entries without a usable name and quantity are skipped, not rejected.
    """
    recipe = get_recipe(db, user_id, recipe_id)
    pairs = [p for p in (_usable_pair(item) for item in items) if p]

    with unit_of_work(db):
        db.query(Ingredient).filter(Ingredient.recipe_id == recipe.id).delete(
            synchronize_session=False
        )
        db.flush()
        for name, quantity in pairs:
            db.add(Ingredient(recipe_id=recipe.id, name=name, quantity=quantity))

    skipped = len(items) - len(pairs)
    if skipped:
        logger.info(f"Skipped {skipped} malformed ingredient(s) for recipe {recipe_id}")
    return list_ingredients(db, user_id, recipe_id)
