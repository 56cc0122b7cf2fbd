"""
Preference context loading.

Every AI request needs the family's preferences record. A missing record
stops the request; it is never replaced with defaults.
"""

import logging

from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.query import execute, maybe_data
from forkyes.errors import FamilyMissing, PreferencesMissing
from forkyes.models import FamilyPreferences, UserFamilyContext

logger = logging.getLogger(__name__)


async def resolve_family_context(client: DatabaseAdapter) -> UserFamilyContext:
    """
    Resolve the signed-in user's family via the get_user_family_context RPC.

    Raises:
        FamilyMissing: user has no family yet (onboarding not finished)
        StoreUnavailable: the RPC failed
    """
    response = execute(client.rpc("get_user_family_context", {}), "get family context")
    rows = response.data or []
    if not rows or not rows[0].get("family_id"):
        raise FamilyMissing()
    return UserFamilyContext(**rows[0])


async def load_preferences(client: DatabaseAdapter, family_id: str) -> FamilyPreferences:
    """
    Fetch exactly one preferences record for a family. No caching.

    Raises:
        PreferencesMissing: no record for this family
        StoreUnavailable: the query failed
    """
    response = execute(
        client.table("family_preferences")
        .select("*")
        .eq("family_id", family_id)
        .maybe_single(),
        "get family preferences",
    )
    data = maybe_data(response)
    if not data:
        logger.info(f"No preferences for family {family_id}")
        raise PreferencesMissing(family_id)
    return FamilyPreferences(**data)
