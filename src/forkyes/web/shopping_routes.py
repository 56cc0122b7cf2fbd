"""
Shopping list API endpoints.

The shopping list lives on the week plan; these routes read and extend
the list for one week (the current week unless `week_start` is given).
"""

from datetime import date

from fastapi import APIRouter, Depends

from forkyes.db.adapter import DatabaseAdapter
from forkyes.models import ShoppingListItem, UserFamilyContext
from forkyes.services import meals as meal_service
from forkyes.web.deps import get_db, get_family_context

router = APIRouter(prefix="/shopping-list", tags=["shopping"])


def _resolve_week(week_start: date | None) -> date:
    return meal_service.week_start_for(week_start or date.today())


@router.get("")
async def get_shopping_list(
    week_start: date | None = None,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    """Items for the week plus summary stats."""
    plan, stats = await meal_service.get_week_stats(
        db, context.family_id, _resolve_week(week_start)
    )
    items = plan.shopping_list if plan else []
    return {"items": items, "stats": stats}


@router.post("", response_model=list[ShoppingListItem])
async def add_item(
    item: ShoppingListItem,
    week_start: date | None = None,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    """Append an item to the week's list and return the whole list."""
    plan = await meal_service.add_shopping_list_item(
        db, context.family_id, _resolve_week(week_start), item
    )
    return plan.shopping_list
