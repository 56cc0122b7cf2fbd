"""
Meal and week plan API endpoints.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from forkyes.db.adapter import DatabaseAdapter
from forkyes.errors import NotFound
from forkyes.models import (
    Meal,
    MealRating,
    PlannedMeal,
    PlanStatus,
    RecommendedMeal,
    UserFamilyContext,
    WeekPlan,
)
from forkyes.services import meals as meal_service
from forkyes.web.deps import get_db, get_family_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meals"])


class RatingRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    notes: str | None = None
    would_make_again: bool = True
    kid_approved: bool | None = None


class WeekPlanRequest(BaseModel):
    meals: list[PlannedMeal] = Field(default_factory=list)
    status: PlanStatus = "draft"


# =============================================================================
# Meals
# =============================================================================


@router.get("/meals/recommended", response_model=list[RecommendedMeal])
async def recommended_meals(
    exclude_rated: bool = False,
    limit: int = Query(10, ge=1, le=50),
    db: DatabaseAdapter = Depends(get_db),
):
    """Meals ranked for the signed-in user's family."""
    return await meal_service.get_recommended_meals(db, exclude_rated, limit)


@router.get("/meals/search", response_model=list[Meal])
async def search_meals(
    q: str = Query(..., min_length=1),
    tags: list[str] | None = Query(None),
    max_prep_time: int | None = Query(None, ge=0),
    db: DatabaseAdapter = Depends(get_db),
):
    return await meal_service.search_meals(db, q, tags, max_prep_time)


@router.get("/meals/ratings", response_model=list[MealRating])
async def family_ratings(
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    """The family's meal ratings, newest first."""
    return await meal_service.get_family_ratings(db, context.family_id)


@router.get("/meals/{meal_id}", response_model=Meal)
async def get_meal(meal_id: str, db: DatabaseAdapter = Depends(get_db)):
    meal = await meal_service.get_meal(db, meal_id)
    if meal is None:
        raise NotFound("Meal not found")
    return meal


@router.post("/meals/{meal_id}/rating", response_model=MealRating)
async def rate_meal(
    meal_id: str,
    req: RatingRequest,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    """Rate a meal for the family. Rating again replaces the old rating."""
    return await meal_service.rate_meal(
        db,
        context.family_id,
        meal_id,
        req.rating,
        notes=req.notes,
        would_make_again=req.would_make_again,
        kid_approved=req.kid_approved,
    )


# =============================================================================
# Week plans
# =============================================================================


@router.get("/week-plans", response_model=list[WeekPlan])
async def list_week_plans(
    limit: int = Query(8, ge=1, le=52),
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    return await meal_service.get_family_week_plans(db, context.family_id, limit)


@router.get("/week-plans/{week_start}", response_model=WeekPlan)
async def get_week_plan(
    week_start: date,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    """The plan for the week containing `week_start`."""
    plan = await meal_service.get_week_plan(
        db, context.family_id, meal_service.week_start_for(week_start)
    )
    if plan is None:
        raise NotFound("No plan for this week")
    return plan


@router.put("/week-plans/{week_start}", response_model=WeekPlan)
async def save_week_plan(
    week_start: date,
    req: WeekPlanRequest,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    monday = meal_service.week_start_for(week_start)
    logger.info(f"Saving week plan {monday} for family {context.family_id} ({len(req.meals)} meals)")
    return await meal_service.save_week_plan(
        db, context.family_id, monday, req.meals, req.status
    )


@router.post("/week-plans/{plan_id}/shopping-list")
async def generate_shopping_list(plan_id: str, db: DatabaseAdapter = Depends(get_db)):
    """Rebuild a plan's shopping list from its meals."""
    await meal_service.generate_shopping_list(db, plan_id)
    return {"success": True}
