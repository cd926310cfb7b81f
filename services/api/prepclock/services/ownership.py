"""Ownership rules for user-scoped records.

Meals, time entries and daily notes carry the owner directly. Recipes are
owned through their meal, ingredients through recipe -> meal. ``owner_of``
walks loaded objects; ``scoped`` builds the equivalent filtered query so
lookups never go by record id alone.
"""

from typing import Any, Optional

from sqlalchemy.orm import Query, Session

from ..models import Meal, Recipe, Ingredient, TimeEntry, DailyNote


def owner_of(entity: Any) -> Optional[str]:
    if isinstance(entity, (Meal, TimeEntry, DailyNote)):
        return entity.user_id
    if isinstance(entity, Recipe):
        return owner_of(entity.meal) if entity.meal is not None else None
    if isinstance(entity, Ingredient):
        return owner_of(entity.recipe) if entity.recipe is not None else None
    raise TypeError(f"{type(entity).__name__} has no owner")


def owned_by(entity: Any, user_id: str) -> bool:
    return entity is not None and owner_of(entity) == user_id


def scoped(db: Session, model: type, user_id: str) -> Query:
    """Query ``model`` restricted to rows owned by ``user_id``."""
    if model in (Meal, TimeEntry, DailyNote):
        return db.query(model).filter(model.user_id == user_id)
    if model is Recipe:
        return db.query(Recipe).join(Recipe.meal).filter(Meal.user_id == user_id)
    if model is Ingredient:
        return (
            db.query(Ingredient)
            .join(Ingredient.recipe)
            .join(Recipe.meal)
            .filter(Meal.user_id == user_id)
        )
    raise TypeError(f"{model.__name__} has no owner")
