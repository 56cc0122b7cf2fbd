"""
Signup, onboarding and the current-user view.

Onboarding finishes by creating the user's family (unless they already
have one) and storing its first preferences record.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.client import get_client
from forkyes.errors import PreconditionMissing
from forkyes.models import CookingSkill, Family, FamilyPreferences
from forkyes.services import family as family_service
from forkyes.web.auth import AuthenticatedUser, get_current_user
from forkyes.web.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["onboarding"])

DIETARY_OPTIONS = [
    "Vegetarian", "Vegan", "Gluten-Free", "Dairy-Free",
    "Keto", "Paleo", "Low-Carb", "Halal", "Kosher",
]


class SignupRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str = ""


class OnboardingRequest(BaseModel):
    family_name: str | None = None
    household_size: int = Field(ge=1, le=20, default=2)
    cooking_skill: CookingSkill = "intermediate"
    dietary_restrictions: list[str] = Field(default_factory=list)
    dislikes: list[str] = Field(default_factory=list)
    favorite_meals: list[str] = Field(default_factory=list)


class OnboardingResponse(BaseModel):
    family_id: str
    family: Family | None = None
    preferences: FamilyPreferences
    redirect: str = "/dashboard"


@router.post("/auth/signup")
async def signup(req: SignupRequest):
    """Register with email + password. Supabase sends the confirmation email."""
    client = get_client()
    try:
        client.auth.sign_up({
            "email": req.email,
            "password": req.password,
            "options": {"data": {"full_name": req.full_name}},
        })
    except Exception as e:
        logger.warning(f"Signup failed for {req.email}: {e}")
        raise PreconditionMissing(getattr(e, "message", None) or str(e)) from e

    return {"message": "Check your email for the confirmation link!"}


@router.get("/me")
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_db),
):
    """Auth user, public.users row and family context (debug view)."""
    record = await family_service.get_user_record(db, user.id)
    context = await family_service.get_user_family_context(db)
    return {
        "user_id": user.id,
        "email": user.email,
        "display_name": user.full_name or (user.email.split("@")[0] if user.email else "User"),
        "user_record": record,
        "family_context": context.model_dump() if context else None,
    }


@router.get("/onboarding/options")
async def onboarding_options():
    """Choices offered by the onboarding form."""
    return {
        "dietary_restrictions": DIETARY_OPTIONS,
        "cooking_skills": ["beginner", "intermediate", "advanced", "professional"],
    }


@router.post("/onboarding/complete", response_model=OnboardingResponse)
async def complete_onboarding(
    req: OnboardingRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_db),
):
    """Create the family if needed, then save its preferences."""
    family = None
    context = await family_service.get_user_family_context(db)

    if context and context.family_id:
        family_id = context.family_id
    else:
        name = (req.family_name or "").strip() or _default_family_name(user)
        family = await family_service.create_family(db, name)
        family_id = family.id

    preferences = await family_service.update_family_preferences(
        db,
        family_id,
        req.model_dump(exclude={"family_name"}),
    )
    logger.info(f"Onboarding complete for user {user.id}, family {family_id}")
    return OnboardingResponse(family_id=family_id, family=family, preferences=preferences)


def _default_family_name(user: AuthenticatedUser) -> str:
    if user.full_name:
        return f"{user.full_name.split()[-1]} Family"
    if user.email:
        return f"{user.email.split('@')[0]}'s Family"
    return "My Family"
