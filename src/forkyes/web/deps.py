"""
FastAPI dependencies for the store and AI clients.

Routes never reach for module-level clients directly; tests swap these
out with app.dependency_overrides.
"""

from fastapi import Depends

from forkyes.ai.client import get_completion_client
from forkyes.ai.service import AIService
from forkyes.config import get_settings
from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.client import get_authenticated_client
from forkyes.models import UserFamilyContext
from forkyes.services.preferences import resolve_family_context
from forkyes.web.auth import AuthenticatedUser, get_current_user


def get_db(user: AuthenticatedUser = Depends(get_current_user)) -> DatabaseAdapter:
    """Supabase client acting as the signed-in user (RLS applies)."""
    return get_authenticated_client(user.access_token)


def get_ai_service() -> AIService:
    return AIService(get_completion_client(), settings=get_settings())


async def get_family_context(db: DatabaseAdapter = Depends(get_db)) -> UserFamilyContext:
    """The signed-in user's family, or 400 if onboarding is not finished."""
    return await resolve_family_context(db)
