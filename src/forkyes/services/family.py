"""
ForkYes - Family service.

Family creation, membership and preferences. Creation and joining are
database functions so the admin assignment happens atomically on the
Supabase side; role checks are enforced there by row level security.
"""

import logging
from typing import Any

from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.query import execute, maybe_data
from forkyes.errors import NotFound, StoreUnavailable
from forkyes.models import Family, FamilyPreferences, User, UserFamilyContext, UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# Family Operations
# =============================================================================


async def ensure_user_record(client: DatabaseAdapter) -> None:
    """
    Make sure the public.users row exists for the signed-in user.

    Failure is logged and ignored: the row usually exists already.
    """
    try:
        execute(client.rpc("ensure_user_record", {}), "ensure user record")
    except StoreUnavailable as e:
        logger.warning(f"Failed to ensure user record: {e.message}")


async def create_family(client: DatabaseAdapter, family_name: str) -> Family:
    """Create a family and make the current user its admin."""
    await ensure_user_record(client)

    response = execute(
        client.rpc("create_family_with_admin", {"family_name": family_name}),
        "create family",
    )
    family_id = response.data

    family_resp = execute(
        client.table("families").select("*").eq("id", family_id).maybe_single(),
        "fetch created family",
    )
    data = maybe_data(family_resp)
    if not data:
        raise NotFound(f"Family {family_id} not found after creation")
    logger.info(f"Created family {family_id} ({family_name})")
    return Family(**data)


async def join_family(
    client: DatabaseAdapter,
    family_id: str,
    role: UserRole = "member",
) -> None:
    """Join an existing family as a member or child."""
    execute(
        client.rpc("join_family", {"invite_family_id": family_id, "user_role": role}),
        "join family",
    )


async def get_user_family_context(client: DatabaseAdapter) -> UserFamilyContext | None:
    """Family context for the signed-in user, None if the RPC returns no row."""
    response = execute(client.rpc("get_user_family_context", {}), "get family context")
    rows = response.data or []
    return UserFamilyContext(**rows[0]) if rows else None


async def get_family_members(client: DatabaseAdapter, family_id: str) -> list[User]:
    """All users in a family."""
    response = execute(
        client.table("users").select("*").eq("family_id", family_id),
        "get family members",
    )
    return [User(**row) for row in response.data or []]


async def get_user_record(client: DatabaseAdapter, user_id: str) -> dict[str, Any] | None:
    """Raw public.users row, for the debug view."""
    response = execute(
        client.table("users").select("*").eq("id", user_id).maybe_single(),
        "get user record",
    )
    return maybe_data(response)


async def update_user_role(client: DatabaseAdapter, user_id: str, role: UserRole) -> None:
    """Change a user's role. Only admins pass the store's policy check."""
    execute(
        client.table("users").update({"role": role}).eq("id", user_id),
        "update user role",
    )


# =============================================================================
# Preferences Operations
# =============================================================================


async def get_family_preferences(
    client: DatabaseAdapter,
    family_id: str,
) -> FamilyPreferences | None:
    """Preferences for a family, None if not set yet."""
    response = execute(
        client.table("family_preferences")
        .select("*")
        .eq("family_id", family_id)
        .maybe_single(),
        "get family preferences",
    )
    data = maybe_data(response)
    return FamilyPreferences(**data) if data else None


async def update_family_preferences(
    client: DatabaseAdapter,
    family_id: str,
    updates: dict[str, Any],
) -> FamilyPreferences:
    """
    Create or update a family's preferences.

    Args:
        updates: Any of household_size, cooking_skill, dietary_restrictions,
            dislikes, favorite_meals. Metadata keys are ignored.
    """
    data = {
        key: value
        for key, value in updates.items()
        if key not in ("id", "family_id", "created_at", "updated_at")
    }
    response = execute(
        client.table("family_preferences").upsert(
            {"family_id": family_id, **data},
            on_conflict="family_id",
        ),
        "update family preferences",
    )
    return FamilyPreferences(**response.data[0])
