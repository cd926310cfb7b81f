"""Meals CRUD API router.

Endpoints:
- GET /api/meals - Page through the caller's meals
- POST /api/meals - Create meal with nested recipes
- GET /api/meals/{id} - Get meal with recipes and ingredients
- PUT /api/meals/{id} - Full-replace update
- DELETE /api/meals/{id} - Delete meal (cascades)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..deps import get_current_user_id, get_db
from ..errors import failure_message
from ..infra.idempotency import idempotency_precheck, idempotency_store_result, idempotency_clear_key
from ..schemas import (
    MealCreate, MealUpdate, MealOut, MealResponse, MealSavedResponse,
    MealListResponse, MessageResponse, PaginationOut,
)
from ..services import meals as meal_service
from ..settings import settings

router = APIRouter(prefix="/meals")
logger = logging.getLogger("prepclock.meals")


@router.get("", response_model=MealListResponse)
def list_meals(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List meals, newest date first, with nested recipes."""
    with failure_message("retrieve meals"):
        result = meal_service.list_meals(db, user_id, page=page, limit=limit, search=search)
        return MealListResponse(
            meals=result.items,
            pagination=PaginationOut(
                page=result.page, limit=result.limit, total=result.total, pages=result.pages
            ),
        )


@router.post("", response_model=MealSavedResponse, status_code=201)
async def create_meal(
    request: Request,
    payload: MealCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create a meal, optionally with recipes and ingredients."""
    pre = await idempotency_precheck(request, user_id=user_id, route_key="meal_create")
    if isinstance(pre, JSONResponse):
        return pre

    try:
        with failure_message("create meal"):
            meal = meal_service.create_meal(
                db,
                user_id,
                title=payload.title,
                description=payload.description,
                date=payload.date,
                recipes=payload.recipes,
            )
            resp = MealSavedResponse(message="Meal created successfully", meal=meal)
    except Exception:
        if pre:
            await idempotency_clear_key(pre[0])
        raise

    if pre:
        await idempotency_store_result(
            pre[0], pre[1], status=201, body=resp.model_dump(mode="json", by_alias=True)
        )
    return resp


@router.get("/{meal_id}", response_model=MealResponse)
def get_meal(
    meal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("retrieve meal"):
        return MealResponse(meal=meal_service.get_meal(db, user_id, meal_id))


@router.put("/{meal_id}", response_model=MealSavedResponse)
def update_meal(
    meal_id: str,
    payload: MealUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Replace meal fields. If recipes are provided, they replace all existing recipes."""
    with failure_message("update meal"):
        meal = meal_service.update_meal(
            db,
            user_id,
            meal_id,
            title=payload.title,
            description=payload.description,
            date=payload.date,
            recipes=payload.recipes,
        )
        return MealSavedResponse(message="Meal updated successfully", meal=meal)


@router.delete("/{meal_id}", response_model=MessageResponse)
def delete_meal(
    meal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a meal together with its recipes and ingredients."""
    with failure_message("delete meal"):
        meal_service.delete_meal(db, user_id, meal_id)
        return MessageResponse(message="Meal deleted successfully")
