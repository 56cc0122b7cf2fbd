"""
ForkYes - Meal and week plan service.

Recipe browsing, ratings, weekly plans and the shopping lists derived
from them. Recommendation ranking and shopping list generation run as
database functions; this module just forwards parameters.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any

from pydantic import BaseModel

from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.query import execute, maybe_data
from forkyes.models import (
    Meal,
    MealRating,
    PlannedMeal,
    PlanStatus,
    RecommendedMeal,
    ShoppingListItem,
    WeekPlan,
)

logger = logging.getLogger(__name__)


def _quote_filter_value(value: str) -> str:
    """Double-quote a PostgREST filter value so commas and parentheses stay literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


# =============================================================================
# Meal Operations
# =============================================================================


async def get_recommended_meals(
    client: DatabaseAdapter,
    exclude_rated: bool = False,
    limit: int = 10,
) -> list[RecommendedMeal]:
    """Meals ranked against the signed-in user's family preferences."""
    response = execute(
        client.rpc(
            "get_recommended_meals",
            {"exclude_rated": exclude_rated, "limit_count": limit},
        ),
        "get recommended meals",
    )
    return [RecommendedMeal(**row) for row in response.data or []]


async def search_meals(
    client: DatabaseAdapter,
    query: str,
    tags: list[str] | None = None,
    max_prep_time: int | None = None,
) -> list[Meal]:
    """
    Search meals by title or tag, best rated first.

    Args:
        query: Matched case-insensitively against the title, or exactly
            against a tag
        tags: Only meals sharing at least one of these tags
        max_prep_time: Prep time ceiling in minutes
    """
    builder = (
        client.table("meals")
        .select("*")
        .or_(
            f"title.ilike.{_quote_filter_value(f'%{query}%')},"
            f"tags.cs.{{{_quote_filter_value(query)}}}"
        )
    )

    if tags:
        builder = builder.ov("tags", tags)

    if max_prep_time:
        builder = builder.lte("prep_time", max_prep_time)

    response = execute(builder.order("rating_avg", desc=True), "search meals")
    return [Meal(**row) for row in response.data or []]


async def get_meal(client: DatabaseAdapter, meal_id: str) -> Meal | None:
    """A single meal by ID."""
    response = execute(
        client.table("meals").select("*").eq("id", meal_id).maybe_single(),
        "get meal",
    )
    data = maybe_data(response)
    return Meal(**data) if data else None


async def rate_meal(
    client: DatabaseAdapter,
    family_id: str,
    meal_id: str,
    rating: int,
    notes: str | None = None,
    would_make_again: bool = True,
    kid_approved: bool | None = None,
) -> MealRating:
    """Create or replace the family's rating for a meal."""
    payload = MealRating(
        family_id=family_id,
        meal_id=meal_id,
        rating=rating,
        notes=notes,
        would_make_again=would_make_again,
        kid_approved=kid_approved,
    )
    response = execute(
        client.table("meal_ratings").upsert(
            payload.model_dump(exclude={"id", "created_at"}),
            on_conflict="family_id,meal_id",
        ),
        "rate meal",
    )
    return MealRating(**response.data[0])


async def get_family_ratings(client: DatabaseAdapter, family_id: str) -> list[MealRating]:
    """The family's ratings, newest first."""
    response = execute(
        client.table("meal_ratings")
        .select("*")
        .eq("family_id", family_id)
        .order("created_at", desc=True),
        "get family ratings",
    )
    return [MealRating(**row) for row in response.data or []]


# =============================================================================
# Week Plan Operations
# =============================================================================


async def get_week_plan(
    client: DatabaseAdapter,
    family_id: str,
    week_start: date,
) -> WeekPlan | None:
    """The family's plan for a week. A week without a plan is None, not an error."""
    response = execute(
        client.table("week_plans")
        .select("*")
        .eq("family_id", family_id)
        .eq("week_start", week_start.isoformat())
        .maybe_single(),
        "get week plan",
    )
    data = maybe_data(response)
    return WeekPlan(**data) if data else None


async def save_week_plan(
    client: DatabaseAdapter,
    family_id: str,
    week_start: date,
    meals: list[PlannedMeal],
    status: PlanStatus = "draft",
    shopping_list: list[ShoppingListItem] | None = None,
) -> WeekPlan:
    """Create or update the plan for a week."""
    record: dict[str, Any] = {
        "family_id": family_id,
        "week_start": week_start.isoformat(),
        "meals": [m.model_dump() for m in meals],
        "status": status,
    }
    if shopping_list is not None:
        record["shopping_list"] = [item.model_dump() for item in shopping_list]

    response = execute(
        client.table("week_plans").upsert(record, on_conflict="family_id,week_start"),
        "save week plan",
    )
    return WeekPlan(**response.data[0])


async def generate_shopping_list(client: DatabaseAdapter, plan_id: str) -> None:
    """Rebuild a plan's shopping list from its meals (database function)."""
    execute(
        client.rpc("generate_shopping_list_from_plan", {"plan_id": plan_id}),
        "generate shopping list",
    )
    logger.info(f"Generated shopping list for plan {plan_id}")


async def get_family_week_plans(
    client: DatabaseAdapter,
    family_id: str,
    limit: int = 8,
) -> list[WeekPlan]:
    """The family's most recent plans, newest week first."""
    response = execute(
        client.table("week_plans")
        .select("*")
        .eq("family_id", family_id)
        .order("week_start", desc=True)
        .limit(limit),
        "get week plans",
    )
    return [WeekPlan(**row) for row in response.data or []]


async def add_shopping_list_item(
    client: DatabaseAdapter,
    family_id: str,
    week_start: date,
    item: ShoppingListItem,
) -> WeekPlan:
    """
    Append an item to the week's shopping list, starting a draft plan if needed.

    Read-modify-write of the whole plan row: two concurrent appends to the
    same week can lose one item (last upsert wins). Callers that need
    concurrent writers should serialize per family.
    """
    plan = await get_week_plan(client, family_id, week_start)
    if plan is None:
        plan = WeekPlan(family_id=family_id, week_start=week_start)

    return await save_week_plan(
        client,
        family_id,
        week_start,
        plan.meals,
        plan.status,
        shopping_list=[*plan.shopping_list, item],
    )


# =============================================================================
# Week Stats
# =============================================================================


class WeekStats(BaseModel):
    week_start: date
    plan_status: PlanStatus | None = None
    planned_meals: int = 0
    shopping_items: int = 0
    checked_items: int = 0
    ratings_count: int = 0
    recent_plans: int = 0


async def get_week_stats(
    client: DatabaseAdapter,
    family_id: str,
    week_start: date,
) -> tuple[WeekPlan | None, WeekStats]:
    """
    Load the week's plan together with summary counts.

    The three reads are independent, so they run concurrently on worker
    threads (the Supabase client is synchronous) and are joined.
    """
    plan_query = (
        client.table("week_plans")
        .select("*")
        .eq("family_id", family_id)
        .eq("week_start", week_start.isoformat())
        .maybe_single()
    )
    ratings_query = client.table("meal_ratings").select("id").eq("family_id", family_id)
    recent_query = (
        client.table("week_plans")
        .select("id")
        .eq("family_id", family_id)
        .order("week_start", desc=True)
        .limit(8)
    )

    plan_resp, ratings_resp, recent_resp = await asyncio.gather(
        asyncio.to_thread(execute, plan_query, "get week plan"),
        asyncio.to_thread(execute, ratings_query, "get family ratings"),
        asyncio.to_thread(execute, recent_query, "get week plans"),
    )

    plan_data = maybe_data(plan_resp)
    plan = WeekPlan(**plan_data) if plan_data else None

    stats = WeekStats(
        week_start=week_start,
        ratings_count=len(ratings_resp.data or []),
        recent_plans=len(recent_resp.data or []),
    )
    if plan is not None:
        stats.plan_status = plan.status
        stats.planned_meals = len(plan.meals)
        stats.shopping_items = len(plan.shopping_list)
        stats.checked_items = sum(1 for item in plan.shopping_list if item.checked)

    return plan, stats
