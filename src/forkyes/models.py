"""
ForkYes - Domain models.

Pydantic models for the records stored in Supabase and for the
constraint objects callers send with AI requests.

Store rows use snake_case. Constraint objects arrive from the frontend
in camelCase (`maxPrepTime`, `plannedMeals`), so they accept both.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CookingSkill = Literal["beginner", "intermediate", "advanced", "professional"]
UserRole = Literal["admin", "member", "child"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]
PlanStatus = Literal["draft", "confirmed"]


def _dedupe(values: list[str]) -> list[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


# =============================================================================
# Family
# =============================================================================


class Family(BaseModel):
    id: str
    name: str
    created_at: str | None = None


class User(BaseModel):
    id: str
    email: str | None = None
    family_id: str | None = None
    role: UserRole = "member"
    created_at: str | None = None


class UserFamilyContext(BaseModel):
    """Resolved link between the signed-in user and their family."""

    user_id: str
    family_id: str | None = None
    family_name: str | None = None
    user_role: str = "member"
    household_size: int | None = None


class FamilyPreferences(BaseModel):
    """Dietary, skill and taste profile used to personalize AI prompts."""

    id: str | None = None
    family_id: str | None = None
    household_size: int = Field(default=2, ge=1)
    cooking_skill: CookingSkill = "intermediate"
    dietary_restrictions: list[str] = Field(default_factory=list)
    dislikes: list[str] = Field(default_factory=list)
    favorite_meals: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("dietary_restrictions", "dislikes", "favorite_meals", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value

    @field_validator("dietary_restrictions", "dislikes", "favorite_meals")
    @classmethod
    def _unique(cls, value: list[str]) -> list[str]:
        return _dedupe(value)


# =============================================================================
# Meals
# =============================================================================


class Ingredient(BaseModel):
    name: str
    amount: str = ""
    category: str | None = None
    optional: bool = False


class NutritionInfo(BaseModel):
    calories: float | None = None
    protein: str | None = None
    carbs: str | None = None
    fat: str | None = None
    fiber: str | None = None
    sodium: str | None = None


class Meal(BaseModel):
    id: str | None = None
    title: str
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=4, gt=0)
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    nutrition: NutritionInfo = Field(default_factory=NutritionInfo)
    image_url: str | None = None
    source_url: str | None = None
    rating_avg: float = 0
    rating_count: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class RecommendedMeal(BaseModel):
    meal_id: str
    title: str
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 4
    tags: list[str] = Field(default_factory=list)
    rating_avg: float = 0
    matches_preferences: bool = False


class MealRating(BaseModel):
    id: str | None = None
    family_id: str
    meal_id: str
    rating: int = Field(ge=1, le=5)
    notes: str | None = None
    would_make_again: bool = True
    kid_approved: bool | None = None
    created_at: str | None = None


# =============================================================================
# Week plans
# =============================================================================


class PlannedMeal(BaseModel):
    day: str
    meal_type: MealType
    meal_id: str
    servings: int = Field(default=1, gt=0)
    notes: str | None = None


class ShoppingListItem(BaseModel):
    name: str
    quantity: str = ""
    category: str = "other"
    checked: bool = False


class WeekPlan(BaseModel):
    id: str | None = None
    family_id: str
    week_start: date
    status: PlanStatus = "draft"
    meals: list[PlannedMeal] = Field(default_factory=list)
    shopping_list: list[ShoppingListItem] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("meals", "shopping_list", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value


# =============================================================================
# AI request constraints
# =============================================================================


class _Constraints(BaseModel):
    """Loose validation: camelCase or snake_case, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class MealSuggestionConstraints(_Constraints):
    max_prep_time: int | None = None
    max_cook_time: int | None = None
    available_ingredients: list[str] | None = None
    cuisine: str | None = None
    meal_type: str | None = None


class PlannedMealInput(_Constraints):
    """A meal plus the number of servings the family wants of it."""

    meal: Meal
    servings: int = Field(gt=0)


class ShoppingListConstraints(_Constraints):
    planned_meals: list[PlannedMealInput] = Field(default_factory=list)


class MealModifications(_Constraints):
    dietary_restrictions: list[str] | None = None
    servings: int | None = None
    available_ingredients: list[str] | None = None
    missing_ingredients: list[str] | None = None


class MealModificationConstraints(MealModifications):
    meal: Meal | None = None

    def modifications(self) -> MealModifications:
        return MealModifications(
            dietary_restrictions=self.dietary_restrictions,
            servings=self.servings,
            available_ingredients=self.available_ingredients,
            missing_ingredients=self.missing_ingredients,
        )
