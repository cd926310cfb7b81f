"""SQLAlchemy ORM models for PrepClock.

Tables:
- meals: Meal-prep entries owned by a user
- recipes: Instructions attached to a meal
- ingredients: Free-text name/quantity pairs attached to a recipe
- time_entries: Clock-in/clock-out work sessions
- daily_notes: One free-text note per user per calendar day
"""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Text,
    CheckConstraint,
    ForeignKey,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


# Time entry lifecycle: ACTIVE <-> PAUSED -> COMPLETED (terminal)
ACTIVE = "ACTIVE"
PAUSED = "PAUSED"
COMPLETED = "COMPLETED"
TIME_ENTRY_STATUSES = (ACTIVE, PAUSED, COMPLETED)


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Meal(Base):
    """A planned meal owned by one user."""
    __tablename__ = "meals"
    __table_args__ = (
        Index("ix_meals_user_id", "user_id"),
        Index("ix_meals_user_date", "user_id", "date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    recipes: Mapped[list["Recipe"]] = relationship(
        "Recipe", back_populates="meal", cascade="all, delete-orphan",
        order_by="Recipe.created_at"
    )


class Recipe(Base):
    """Cooking instructions for a meal."""
    __tablename__ = "recipes"
    __table_args__ = (
        Index("ix_recipes_meal_id", "meal_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    meal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("meals.id", ondelete="CASCADE"), nullable=False
    )

    instructions: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    meal: Mapped["Meal"] = relationship("Meal", back_populates="recipes")
    ingredients: Mapped[list["Ingredient"]] = relationship(
        "Ingredient", back_populates="recipe", cascade="all, delete-orphan",
        order_by="Ingredient.name"
    )


class Ingredient(Base):
    """Ingredient line for a recipe. Quantity is free text ("2 cups dry")."""
    __tablename__ = "ingredients"
    __table_args__ = (
        Index("ix_ingredients_recipe_id", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[str] = mapped_column(String(100), nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")


class TimeEntry(Base):
    """One tracked work session.

    At most one ACTIVE entry per user; the partial unique index turns a lost
    start race into an IntegrityError instead of a second active session.
    """
    __tablename__ = "time_entries"
    __table_args__ = (
        Index("ix_time_entries_user_start", "user_id", "start_time"),
        Index(
            "uq_time_entries_one_active", "user_id", unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in TIME_ENTRY_STATUSES) + ")",
            name="ck_time_entries_status",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Status: ACTIVE | PAUSED | COMPLETED
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ACTIVE)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class DailyNote(Base):
    """Free-text note, one per user per calendar day."""
    __tablename__ = "daily_notes"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_notes_user_date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
