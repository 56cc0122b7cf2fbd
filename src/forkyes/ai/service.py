"""
ForkYes - AI service.

The three AI features. Each one renders a prompt from the family's
preferences, makes one completion call with the budget for its request
type, and parses the reply.

Transport failures and empty replies raise CompletionFailed. Replies that
do not parse are not failures; the parsers fall back quietly.
"""

import logging
from typing import Any

from forkyes.ai.client import CompletionClient
from forkyes.ai.model_router import get_request_config
from forkyes.ai.parsing import (
    parse_meal_modification,
    parse_meal_suggestions,
    parse_shopping_list,
)
from forkyes.ai.prompts import (
    build_meal_suggestion_prompt,
    build_messages,
    build_modification_prompt,
    build_shopping_list_prompt,
)
from forkyes.errors import CompletionFailed
from forkyes.models import (
    FamilyPreferences,
    Meal,
    MealModifications,
    MealSuggestionConstraints,
    PlannedMealInput,
)

logger = logging.getLogger(__name__)


class AIService:
    """
    AI meal planning features on top of a CompletionClient.

    Args:
        completion: Client used for every completion call
        settings: Optional Settings for per-request-type model overrides
    """

    def __init__(self, completion: CompletionClient, settings=None) -> None:
        self.completion = completion
        self.settings = settings

    async def _complete(self, request_type: str, user_prompt: str, failure_message: str) -> str:
        config = get_request_config(request_type, self.settings)
        try:
            text = await self.completion.complete(
                model=config["model"],
                messages=build_messages(request_type, user_prompt),
                temperature=config["temperature"],
                max_tokens=config["max_tokens"],
                request_type=request_type,
            )
        except Exception as e:
            logger.error(f"{failure_message}: {e}")
            raise CompletionFailed(failure_message, {"cause": str(e)}) from e

        if not text:
            raise CompletionFailed("No response from AI")
        return text

    async def generate_meal_suggestions(
        self,
        preferences: FamilyPreferences,
        constraints: MealSuggestionConstraints | None = None,
    ) -> list[dict[str, Any]]:
        """Suggest meals for the family. Partial meal dicts, possibly empty."""
        prompt = build_meal_suggestion_prompt(preferences, constraints)
        text = await self._complete(
            "meal_suggestions", prompt, "Failed to generate meal suggestions"
        )
        suggestions = parse_meal_suggestions(text)
        logger.info(f"Generated {len(suggestions)} meal suggestions")
        return suggestions

    async def optimize_shopping_list(
        self,
        planned_meals: list[PlannedMealInput],
        preferences: FamilyPreferences,
    ) -> list[dict[str, Any]]:
        """Consolidated shopping list items for the planned meals."""
        prompt = build_shopping_list_prompt(planned_meals, preferences)
        text = await self._complete(
            "shopping_list", prompt, "Failed to optimize shopping list"
        )
        return parse_shopping_list(text)

    async def get_meal_modifications(
        self,
        meal: Meal,
        modifications: MealModifications | None = None,
        original: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        The adapted recipe, or the original meal if the reply does not parse.

        Args:
            original: The meal exactly as the caller sent it; returned as is
                on fallback. Defaults to the fields set on `meal`.
        """
        prompt = build_modification_prompt(meal, modifications)
        text = await self._complete(
            "meal_modification", prompt, "Failed to modify meal"
        )
        if original is None:
            original = meal.model_dump(exclude_unset=True)
        return parse_meal_modification(text, original)
