"""Dev-only endpoints for seeding.

Endpoints:
- POST /api/dev/seed - Create the sample meal-prep catalogue for the caller
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import get_current_user_id, get_db
from ..errors import failure_message
from ..models import Meal
from ..schemas import RecipeIn, SeedResponse
from ..services import meals as meal_service
from ..services.ownership import scoped

router = APIRouter()
logger = logging.getLogger("prepclock.dev")


# Sample meal-prep catalogue
SEED_MEALS = [
    {
        "title": "Weekly Meal Prep - Chicken & Vegetables",
        "description": "Healthy meal prep with grilled chicken, roasted vegetables, and quinoa for the entire week",
        "date": "2024-01-15",
        "recipes": [
            {
                "instructions": (
                    "1. Preheat oven to 400°F (200°C)\n"
                    "2. Season chicken breasts with olive oil, garlic powder, paprika, salt, and pepper\n"
                    "3. Cut vegetables into bite-sized pieces and toss with olive oil and seasonings\n"
                    "4. Bake for 25-30 minutes until chicken is cooked through and vegetables are tender\n"
                    "5. Cook quinoa according to package directions\n"
                    "6. Portion into meal prep containers and refrigerate for up to 4 days"
                ),
                "ingredients": [
                    {"name": "Chicken breasts", "quantity": "4 lbs"},
                    {"name": "Broccoli", "quantity": "2 heads"},
                    {"name": "Bell peppers", "quantity": "3 pieces"},
                    {"name": "Zucchini", "quantity": "2 medium"},
                    {"name": "Olive oil", "quantity": "1/4 cup"},
                    {"name": "Garlic powder", "quantity": "2 tsp"},
                    {"name": "Paprika", "quantity": "1 tsp"},
                    {"name": "Quinoa", "quantity": "2 cups dry"},
                ],
            },
        ],
    },
    {
        "title": "Sunday Comfort Food - Beef Stew",
        "description": "Hearty beef stew perfect for meal prep and freezing",
        "date": "2024-01-14",
        "recipes": [
            {
                "instructions": (
                    "1. Cut beef into 1-inch cubes and season with salt and pepper\n"
                    "2. Brown beef on all sides, then remove and set aside\n"
                    "3. Sauté onions, carrots, and celery until softened\n"
                    "4. Return beef to pot with broth, red wine, and herbs\n"
                    "5. Simmer covered for 2-3 hours until beef is tender\n"
                    "6. Add potatoes for the last 30 minutes and season to taste"
                ),
                "ingredients": [
                    {"name": "Beef chuck", "quantity": "3 lbs"},
                    {"name": "Onions", "quantity": "2 large"},
                    {"name": "Carrots", "quantity": "4 medium"},
                    {"name": "Celery", "quantity": "3 stalks"},
                    {"name": "Potatoes", "quantity": "4 medium"},
                    {"name": "Beef broth", "quantity": "6 cups"},
                    {"name": "Red wine", "quantity": "1 cup"},
                    {"name": "Thyme", "quantity": "2 tsp"},
                ],
            },
        ],
    },
    {
        "title": "Asian Stir-Fry Meal Prep",
        "description": "Quick and healthy vegetable stir-fry with tofu and sesame ginger sauce",
        "date": "2024-01-12",
        "recipes": [
            {
                "instructions": (
                    "1. Press tofu and cut into cubes\n"
                    "2. Cook brown rice according to package directions\n"
                    "3. Mix soy sauce, sesame oil, ginger, garlic, and honey for sauce\n"
                    "4. Stir-fry tofu until golden, then vegetables until crisp-tender\n"
                    "5. Toss everything with the sauce and portion with rice"
                ),
                "ingredients": [
                    {"name": "Firm tofu", "quantity": "2 blocks"},
                    {"name": "Brown rice", "quantity": "2 cups dry"},
                    {"name": "Broccoli", "quantity": "1 head"},
                    {"name": "Snap peas", "quantity": "1 cup"},
                    {"name": "Soy sauce", "quantity": "1/4 cup"},
                    {"name": "Sesame oil", "quantity": "2 tbsp"},
                    {"name": "Fresh ginger", "quantity": "1 tbsp"},
                    {"name": "Honey", "quantity": "1 tbsp"},
                ],
            },
        ],
    },
]


@router.post("/dev/seed", response_model=SeedResponse)
def seed_meals(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create sample meals for the caller. Meals whose title already exists are skipped."""
    with failure_message("seed sample meals"):
        existing = {
            title for (title,) in scoped(db, Meal, user_id).with_entities(Meal.title).all()
        }

        created = 0
        for data in SEED_MEALS:
            if data["title"] in existing:
                continue
            meal_service.create_meal(
                db,
                user_id,
                title=data["title"],
                description=data["description"],
                date=datetime.fromisoformat(data["date"]).replace(tzinfo=timezone.utc),
                recipes=[RecipeIn.model_validate(r) for r in data["recipes"]],
            )
            created += 1

        logger.info(f"Seeded {created} meal(s) for user {user_id}")
        return SeedResponse(
            meals_created=created,
            message=f"Created {created} sample meal(s)",
        )
