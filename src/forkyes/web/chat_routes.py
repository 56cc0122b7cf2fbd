"""
Chat endpoint.

One endpoint, four behaviours keyed by the request `type`:

- meal_suggestions: suggestions for the family, optional constraints
- shopping_list: consolidated list, needs constraints.plannedMeals
- meal_modification: adapted recipe, needs constraints.meal
- anything else: a static assistant greeting, no AI or store call

Required constraints are checked before the store is touched, so a bad
request fails fast with 400.
"""

import logging
from typing import Any, TypeVar

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ValidationError

from forkyes.ai.service import AIService
from forkyes.db.adapter import DatabaseAdapter
from forkyes.errors import InvalidConstraints, MealMissing, PlannedMealsMissing
from forkyes.models import (
    FamilyPreferences,
    MealModificationConstraints,
    MealSuggestionConstraints,
    ShoppingListConstraints,
)
from forkyes.services.preferences import load_preferences, resolve_family_context
from forkyes.web.auth import AuthenticatedUser, get_current_user
from forkyes.web.deps import get_ai_service, get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

C = TypeVar("C", bound=BaseModel)

CONSTRAINT_MODELS: dict[str, type[BaseModel]] = {
    "meal_suggestions": MealSuggestionConstraints,
    "shopping_list": ShoppingListConstraints,
    "meal_modification": MealModificationConstraints,
}


class ChatRequest(BaseModel):
    message: str = ""
    type: str = "general"
    constraints: dict[str, Any] | None = None


def parse_constraints(model: type[C], constraints: dict[str, Any] | None) -> C:
    """Validate the open constraints map against one request type's model."""
    try:
        return model.model_validate(constraints or {})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise InvalidConstraints(f"Invalid constraints: {field}: {first['msg']}") from e


async def _family_preferences(db: DatabaseAdapter) -> FamilyPreferences:
    context = await resolve_family_context(db)
    return await load_preferences(db, context.family_id)


def general_reply(message: str) -> str:
    return (
        "I'm your ForkYes meal planning assistant! "
        f'You said: "{message}". '
        "I can suggest meals for your family, build an optimized shopping list "
        "from your planned meals, or adapt a recipe to your needs."
    )


async def dispatch_chat(
    req: ChatRequest,
    db: DatabaseAdapter,
    ai: AIService,
) -> dict[str, Any]:
    """Run one chat request and build its response envelope."""
    if req.type == "meal_suggestions":
        constraints = parse_constraints(MealSuggestionConstraints, req.constraints)
        preferences = await _family_preferences(db)
        suggestions = await ai.generate_meal_suggestions(preferences, constraints)
        if suggestions:
            message = f"Here are {len(suggestions)} meal suggestions for your family!"
        else:
            message = "I couldn't come up with suggestions this time. Try adjusting your constraints."
        return {"type": req.type, "suggestions": suggestions, "message": message}

    if req.type == "shopping_list":
        constraints = parse_constraints(ShoppingListConstraints, req.constraints)
        if not constraints.planned_meals:
            raise PlannedMealsMissing()
        preferences = await _family_preferences(db)
        items = await ai.optimize_shopping_list(constraints.planned_meals, preferences)
        return {
            "type": req.type,
            "shoppingList": items,
            "message": f"Your optimized shopping list has {len(items)} items.",
        }

    if req.type == "meal_modification":
        constraints = parse_constraints(MealModificationConstraints, req.constraints)
        if constraints.meal is None:
            raise MealMissing()
        # Loaded for the precondition only; the prompt uses the request's modifications
        await _family_preferences(db)
        modified = await ai.get_meal_modifications(
            constraints.meal,
            constraints.modifications(),
            original=req.constraints["meal"],
        )
        return {
            "type": req.type,
            "modifiedMeal": modified,
            "message": f"Here's your modified version of {constraints.meal.title}.",
        }

    return {"type": "general", "message": general_reply(req.message)}


@router.post("/chat")
async def chat(
    req: ChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """Send a message to the ForkYes assistant."""
    logger.info(f"Chat request type={req.type} user={user.id}")
    return await dispatch_chat(req, db, ai)
