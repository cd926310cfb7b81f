import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query, selectinload

from ..db import unit_of_work
from ..errors import NotFound, require_text
from ..models import Meal, Recipe, utcnow
from ..schemas import RecipeIn
from .ownership import scoped
from .pagination import LIKE_ESCAPE, Page, contains_pattern, paginate
from .recipes import build_recipe

logger = logging.getLogger("prepclock.meals")

TITLE_REQUIRED = "Title is required and must be a string"


def _clean_optional(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def _meals_for(db: Session, user_id: str) -> Query:
    return scoped(db, Meal, user_id).options(
        selectinload(Meal.recipes).selectinload(Recipe.ingredients)
    )


def list_meals(
    db: Session,
    user_id: str,
    *,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
) -> Page:
    """Page through the caller's meals, newest date first."""
    query = _meals_for(db, user_id)
    if search:
        pattern = contains_pattern(search)
        query = query.filter(
            or_(
                Meal.title.ilike(pattern, escape=LIKE_ESCAPE),
                Meal.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    return paginate(query.order_by(Meal.date.desc(), Meal.created_at.desc()), page, limit)


def get_meal(db: Session, user_id: str, meal_id: str) -> Meal:
    # Someone else's meal is reported exactly like a missing one
    meal = _meals_for(db, user_id).filter(Meal.id == meal_id).first()
    if not meal:
        raise NotFound("Meal not found")
    return meal


def create_meal(
    db: Session,
    user_id: str,
    *,
    title: str,
    description: Optional[str] = None,
    date: Optional[datetime] = None,
    recipes: Optional[Sequence[RecipeIn]] = None,
) -> Meal:
    """Create a meal and any nested recipes/ingredients in one transaction."""
    meal = Meal(
        user_id=user_id,
        title=require_text(title, TITLE_REQUIRED),
        description=_clean_optional(description),
        date=date or utcnow(),
    )
    meal.recipes = [build_recipe(r) for r in (recipes or [])]

    with unit_of_work(db):
        db.add(meal)

    logger.info(f"Created meal {meal.id} with {len(recipes or [])} recipe(s)")
    return get_meal(db, user_id, meal.id)


def update_meal(
    db: Session,
    user_id: str,
    meal_id: str,
    *,
    title: str,
    description: Optional[str] = None,
    date: Optional[datetime] = None,
    recipes: Optional[Sequence[RecipeIn]] = None,
) -> Meal:
    """Full-replace update.

    ``date=None`` keeps the stored date. ``recipes=None`` leaves recipes
    untouched; any list (including an empty one) replaces them all.
    """
    meal = get_meal(db, user_id, meal_id)
    title = require_text(title, TITLE_REQUIRED)
    new_recipes = [build_recipe(r) for r in recipes] if recipes is not None else None

    with unit_of_work(db):
        meal.title = title
        meal.description = _clean_optional(description)
        if date is not None:
            meal.date = date
        if new_recipes is not None:
            # delete-orphan cascade drops old recipes and their ingredients
            meal.recipes = new_recipes
        meal.updated_at = utcnow()

    return get_meal(db, user_id, meal_id)


def delete_meal(db: Session, user_id: str, meal_id: str) -> None:
    meal = get_meal(db, user_id, meal_id)
    with unit_of_work(db):
        db.delete(meal)
    logger.info(f"Deleted meal {meal_id}")
