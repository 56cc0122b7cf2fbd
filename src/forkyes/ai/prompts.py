"""
ForkYes - Prompt builders.

Pure functions from (preferences, constraints) to the user prompt sent
with each AI request.

Two rules shape every prompt:
- The family block is always complete. Empty lists render as "None" so
  the model never has to guess whether a field was forgotten.
- Constraint clauses are sparse. A constraint that was not provided gets
  no line at all, not a placeholder.

Each prompt ends with the JSON shape the parser in forkyes.ai.parsing
expects to find.
"""

from forkyes.errors import MealMissing, PlannedMealsMissing
from forkyes.models import (
    FamilyPreferences,
    Meal,
    MealModificationConstraints,
    MealModifications,
    MealSuggestionConstraints,
    PlannedMealInput,
    ShoppingListConstraints,
)

# =============================================================================
# System prompts
# =============================================================================

MEAL_SUGGESTIONS_SYSTEM_PROMPT = (
    "You are a professional chef and nutritionist helping families plan meals. "
    "Always provide practical, family-friendly recipes with clear instructions "
    "and accurate nutritional estimates."
)

SHOPPING_LIST_SYSTEM_PROMPT = (
    "You are a meal planning assistant that helps optimize shopping lists by "
    "consolidating ingredients, suggesting alternatives, and organizing by store sections."
)

MEAL_MODIFICATION_SYSTEM_PROMPT = (
    "You are a culinary expert helping adapt recipes based on dietary restrictions, "
    "available ingredients, and serving size changes."
)

SYSTEM_PROMPTS: dict[str, str] = {
    "meal_suggestions": MEAL_SUGGESTIONS_SYSTEM_PROMPT,
    "shopping_list": SHOPPING_LIST_SYSTEM_PROMPT,
    "meal_modification": MEAL_MODIFICATION_SYSTEM_PROMPT,
}

# =============================================================================
# Output schemas
# =============================================================================

MEAL_SUGGESTION_SCHEMA = """For each meal, provide in JSON format:
{
  "title": "Meal Name",
  "prep_time": minutes,
  "cook_time": minutes,
  "servings": number,
  "ingredients": [{"name": "ingredient", "amount": "quantity", "category": "produce|protein|dairy|pantry"}],
  "instructions": ["step 1", "step 2", ...],
  "tags": ["tag1", "tag2"],
  "nutrition": {"calories": number, "protein": "Xg", "carbs": "Xg", "fat": "Xg"}
}
Return all meals together as a JSON array."""

SHOPPING_LIST_SCHEMA = """Return as JSON array:
[{"name": "item", "quantity": "amount", "category": "section", "notes": "optional notes"}]"""

MEAL_MODIFICATION_SCHEMA = (
    "Provide the modified recipe in JSON format with updated ingredients, "
    "instructions, and nutritional estimates."
)


def _join_or_none(values: list[str]) -> str:
    return ", ".join(values) or "None"


# =============================================================================
# Builders
# =============================================================================


def build_meal_suggestion_prompt(
    preferences: FamilyPreferences,
    constraints: MealSuggestionConstraints | None = None,
) -> str:
    """Prompt asking for three meals that fit the family and the constraints."""
    prompt = (
        "Please suggest 3 family-friendly meals based on these preferences:\n"
        "\n"
        f"Household size: {preferences.household_size} people\n"
        f"Cooking skill level: {preferences.cooking_skill}\n"
        f"Dietary restrictions: {_join_or_none(preferences.dietary_restrictions)}\n"
        f"Dislikes: {_join_or_none(preferences.dislikes)}\n"
        f"Favorite meals: {_join_or_none(preferences.favorite_meals)}"
    )

    if constraints:
        if constraints.max_prep_time:
            prompt += f"\nMax prep time: {constraints.max_prep_time} minutes"
        if constraints.max_cook_time:
            prompt += f"\nMax cook time: {constraints.max_cook_time} minutes"
        if constraints.available_ingredients:
            prompt += (
                "\nPrefer to use these ingredients: "
                f"{', '.join(constraints.available_ingredients)}"
            )
        if constraints.cuisine:
            prompt += f"\nCuisine preference: {constraints.cuisine}"
        if constraints.meal_type:
            prompt += f"\nMeal type: {constraints.meal_type}"

    prompt += f"\n\n{MEAL_SUGGESTION_SCHEMA}"
    return prompt


def build_shopping_list_prompt(
    planned_meals: list[PlannedMealInput],
    preferences: FamilyPreferences,
) -> str:
    """
    Prompt asking the model to consolidate the week's ingredients.

    Each ingredient line carries the scaling multiplier
    (requested servings / recipe servings) to one decimal place.

    Raises:
        PlannedMealsMissing: no planned meals
    """
    if not planned_meals:
        raise PlannedMealsMissing()

    meals_list = "\n".join(
        f"{pm.meal.title} ({pm.servings} servings, recipe serves {pm.meal.servings})"
        for pm in planned_meals
    )

    ingredient_lines = []
    for pm in planned_meals:
        multiplier = pm.servings / pm.meal.servings
        for ing in pm.meal.ingredients:
            ingredient_lines.append(f"- {ing.name}: {ing.amount} (×{multiplier:.1f})")
    ingredients_text = "\n".join(ingredient_lines)

    return (
        "Please create an optimized shopping list for these meals:\n"
        f"{meals_list}\n"
        "\n"
        "Raw ingredients needed:\n"
        f"{ingredients_text}\n"
        "\n"
        f"Household size: {preferences.household_size}\n"
        f"Dietary restrictions: {_join_or_none(preferences.dietary_restrictions)}\n"
        "\n"
        "Please:\n"
        "1. Consolidate duplicate ingredients with proper quantities\n"
        "2. Organize by store sections (produce, protein, dairy, pantry, frozen, etc.)\n"
        "3. Suggest bulk buying opportunities\n"
        "4. Note any dietary-friendly alternatives\n"
        "\n"
        f"{SHOPPING_LIST_SCHEMA}"
    )


def build_modification_prompt(
    meal: Meal | None,
    modifications: MealModifications | None = None,
) -> str:
    """
    Prompt asking the model to adapt one recipe.

    Raises:
        MealMissing: no meal to modify
    """
    if meal is None:
        raise MealMissing()

    ingredients = ", ".join(f"{ing.amount} {ing.name}".strip() for ing in meal.ingredients)
    instructions = " ".join(meal.instructions)

    prompt = (
        "Please modify this recipe:\n"
        f"Title: {meal.title}\n"
        f"Original servings: {meal.servings}\n"
        f"Prep time: {meal.prep_time} min\n"
        f"Cook time: {meal.cook_time} min\n"
        "\n"
        f"Ingredients: {ingredients}\n"
        f"Instructions: {instructions}\n"
        "\n"
        "Modifications needed:"
    )

    if modifications:
        if modifications.dietary_restrictions:
            prompt += (
                "\n- Adapt for dietary restrictions: "
                f"{', '.join(modifications.dietary_restrictions)}"
            )
        if modifications.servings:
            prompt += f"\n- Adjust servings to: {modifications.servings}"
        if modifications.available_ingredients:
            prompt += (
                "\n- Use these available ingredients: "
                f"{', '.join(modifications.available_ingredients)}"
            )
        if modifications.missing_ingredients:
            prompt += (
                "\n- Find substitutes for missing ingredients: "
                f"{', '.join(modifications.missing_ingredients)}"
            )

    prompt += f"\n\n{MEAL_MODIFICATION_SCHEMA}"
    return prompt


def build_messages(request_type: str, user_prompt: str) -> list[dict[str, str]]:
    """System + user message pair for a request type."""
    return [
        {"role": "system", "content": SYSTEM_PROMPTS[request_type]},
        {"role": "user", "content": user_prompt},
    ]


def build_prompt(
    request_type: str,
    preferences: FamilyPreferences,
    constraints: MealSuggestionConstraints
    | ShoppingListConstraints
    | MealModificationConstraints
    | None = None,
) -> str:
    """
    Render the user prompt for any AI request type.

    Raises:
        KeyError: unknown request type
        PlannedMealsMissing / MealMissing: required constraint absent
    """
    if request_type == "meal_suggestions":
        return build_meal_suggestion_prompt(preferences, constraints)
    if request_type == "shopping_list":
        planned = constraints.planned_meals if constraints else []
        return build_shopping_list_prompt(planned, preferences)
    if request_type == "meal_modification":
        if constraints is None:
            raise MealMissing()
        return build_modification_prompt(constraints.meal, constraints.modifications())
    raise KeyError(request_type)
