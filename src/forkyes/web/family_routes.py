"""
Family API endpoints.

Creating and joining families, members, roles and preferences.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from forkyes.db.adapter import DatabaseAdapter
from forkyes.errors import FamilyMissing, PreferencesMissing
from forkyes.models import (
    CookingSkill,
    Family,
    FamilyPreferences,
    User,
    UserFamilyContext,
    UserRole,
)
from forkyes.services import family as family_service
from forkyes.web.deps import get_db, get_family_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/families", tags=["families"])


# =============================================================================
# Request Models
# =============================================================================


class CreateFamilyRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class JoinFamilyRequest(BaseModel):
    family_id: str
    role: Literal["member", "child"] = "member"


class RoleRequest(BaseModel):
    role: UserRole


class PreferencesUpdate(BaseModel):
    """Partial preferences update; omitted fields keep their stored value."""

    household_size: int | None = Field(default=None, ge=1, le=20)
    cooking_skill: CookingSkill | None = None
    dietary_restrictions: list[str] | None = None
    dislikes: list[str] | None = None
    favorite_meals: list[str] | None = None


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=Family)
async def create_family(req: CreateFamilyRequest, db: DatabaseAdapter = Depends(get_db)):
    """Create a family with the current user as admin."""
    return await family_service.create_family(db, req.name.strip())


@router.post("/join")
async def join_family(req: JoinFamilyRequest, db: DatabaseAdapter = Depends(get_db)):
    """Join an existing family by its ID."""
    await family_service.join_family(db, req.family_id, req.role)
    return {"success": True}


@router.get("/context", response_model=UserFamilyContext)
async def get_context(db: DatabaseAdapter = Depends(get_db)):
    """The current user's family context."""
    context = await family_service.get_user_family_context(db)
    if context is None:
        raise FamilyMissing()
    return context


@router.get("/members", response_model=list[User])
async def get_members(
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    return await family_service.get_family_members(db, context.family_id)


@router.put("/members/{user_id}/role")
async def update_member_role(
    user_id: str,
    req: RoleRequest,
    db: DatabaseAdapter = Depends(get_db),
):
    """Change a member's role. The store only lets admins do this."""
    await family_service.update_user_role(db, user_id, req.role)
    return {"success": True}


@router.get("/preferences", response_model=FamilyPreferences)
async def get_preferences(
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    preferences = await family_service.get_family_preferences(db, context.family_id)
    if preferences is None:
        raise PreferencesMissing(context.family_id)
    return preferences


@router.put("/preferences", response_model=FamilyPreferences)
async def update_preferences(
    req: PreferencesUpdate,
    context: UserFamilyContext = Depends(get_family_context),
    db: DatabaseAdapter = Depends(get_db),
):
    updates = req.model_dump(exclude_none=True)
    logger.info(f"Updating preferences for family {context.family_id}: {sorted(updates)}")
    return await family_service.update_family_preferences(db, context.family_id, updates)
