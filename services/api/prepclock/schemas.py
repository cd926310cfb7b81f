"""Pydantic schemas for the PrepClock API.

Request/response models for:
- Meals (with nested recipes and ingredients)
- Recipes and ingredients
- Daily notes
- Time entries

Responses are serialized with camelCase keys; requests accept either
camelCase or snake_case.
"""

import datetime as dt
from datetime import datetime
from typing import Annotated, Any, Optional, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


_instant = TypeAdapter(datetime)


def calendar_day(value: Any) -> Any:
    """Reduce a timestamp to the server-local calendar day it falls on.

    Plain dates pass through. Clients post `new Date().toISOString()`,
    so full ISO instants have to be accepted too.
    """
    if isinstance(value, str) and len(value.strip()) > 10:
        value = _instant.validate_python(value.strip())
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


CalendarDay = Annotated[dt.date, BeforeValidator(calendar_day)]


# --- Pagination ---

class PaginationOut(ApiModel):
    page: int
    limit: int
    total: int
    pages: int


# --- Ingredient ---

class IngredientIn(ApiModel):
    name: str
    quantity: str


class IngredientOut(ApiModel):
    id: str
    name: str
    quantity: str
    recipe_id: str


class IngredientsReplace(ApiModel):
    # Items are not validated individually; malformed ones are skipped
    ingredients: list[Any]


class IngredientResponse(ApiModel):
    message: str
    ingredient: IngredientOut


class IngredientListResponse(ApiModel):
    ingredients: list[IngredientOut]


class IngredientsSavedResponse(IngredientListResponse):
    message: str


# --- Recipe ---

class RecipeIn(ApiModel):
    """Recipe nested inside a meal create/update."""
    instructions: str
    ingredients: Optional[list[IngredientIn]] = None


class RecipeCreate(ApiModel):
    meal_id: str = Field(..., min_length=1)
    instructions: str
    ingredients: Optional[list[IngredientIn]] = None


class RecipeUpdate(ApiModel):
    instructions: str
    ingredients: Optional[list[IngredientIn]] = None  # Replaces all ingredients if provided


class MealSummaryOut(ApiModel):
    id: str
    title: str
    date: datetime


class RecipeOut(ApiModel):
    id: str
    instructions: str
    meal_id: str
    created_at: datetime
    updated_at: datetime
    ingredients: list[IngredientOut] = []


class RecipeDetailOut(RecipeOut):
    """Recipe with a summary of the meal it belongs to."""
    meal: MealSummaryOut


class RecipeResponse(ApiModel):
    recipe: RecipeDetailOut


class RecipeSavedResponse(RecipeResponse):
    message: str


class RecipeListResponse(ApiModel):
    recipes: list[RecipeDetailOut]
    pagination: PaginationOut


# --- Meal ---

class MealCreate(ApiModel):
    title: str
    description: Optional[str] = None
    date: Optional[datetime] = None
    recipes: Optional[list[RecipeIn]] = None


class MealUpdate(MealCreate):
    """Full replace. Omitted date keeps the stored one; omitted recipes are left alone."""


class MealOut(ApiModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    date: datetime
    created_at: datetime
    updated_at: datetime
    recipes: list[RecipeOut] = []


class MealResponse(ApiModel):
    meal: MealOut


class MealSavedResponse(MealResponse):
    message: str


class MealListResponse(ApiModel):
    meals: list[MealOut]
    pagination: PaginationOut


class MessageResponse(ApiModel):
    message: str


# --- Daily Notes ---

class DailyNoteIn(ApiModel):
    content: str
    date: Optional[CalendarDay] = None


class DailyNoteOut(ApiModel):
    id: str
    user_id: str
    content: str
    date: dt.date
    created_at: datetime
    updated_at: datetime


class DailyNoteResponse(ApiModel):
    daily_note: Optional[DailyNoteOut]
    date: dt.date


class DailyNoteSavedResponse(ApiModel):
    message: str
    daily_note: DailyNoteOut


# --- Time Entries ---

class TimeEntryOut(ApiModel):
    id: str
    user_id: str
    start_time: datetime
    end_time: Optional[datetime]
    status: Literal["ACTIVE", "PAUSED", "COMPLETED"]
    description: Optional[str]
    created_at: datetime
    updated_at: datetime


class TimeEntryResponse(ApiModel):
    message: str
    time_entry: TimeEntryOut


class TimeEntryListResponse(ApiModel):
    time_entries: list[TimeEntryOut]
    period: str
    count: int


class TimeSummaryResponse(ApiModel):
    active_entry: Optional[TimeEntryOut]
    paused_entry: Optional[TimeEntryOut]
    total_seconds: int
    count: int


# --- Ops ---

class ReadyResponse(ApiModel):
    ok: bool
    db_ok: bool
    redis_ok: bool


class SeedResponse(ApiModel):
    meals_created: int
    message: str
