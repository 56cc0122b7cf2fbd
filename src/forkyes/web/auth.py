"""
Authentication utilities for FastAPI routes.

API routes send the Supabase access token as "Authorization: Bearer <token>".
Page routes also accept it from the sb-access-token cookie set by the frontend.
"""

import logging

from fastapi import Cookie, Header
from pydantic import BaseModel

from forkyes.db.client import get_service_client
from forkyes.errors import Unauthorized

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"


class AuthenticatedUser(BaseModel):
    """Authenticated user info from Supabase JWT."""

    id: str
    email: str | None
    full_name: str | None = None
    access_token: str


def validate_token(access_token: str) -> AuthenticatedUser:
    """
    Validate a Supabase JWT and extract user info.

    Raises:
        Unauthorized: token rejected or auth service unreachable
    """
    try:
        client = get_service_client()
        user_response = client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise Unauthorized("Invalid or expired token") from e

    if not user_response or not user_response.user:
        raise Unauthorized("Invalid or expired token")

    user = user_response.user
    metadata = user.user_metadata or {}
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        full_name=metadata.get("full_name"),
        access_token=access_token,
    )


async def get_current_user(authorization: str | None = Header(None)) -> AuthenticatedUser:
    """Dependency: the signed-in user, or 401."""
    if not authorization:
        raise Unauthorized("Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise Unauthorized("Invalid authorization format")

    return validate_token(authorization[7:])  # Remove "Bearer " prefix


async def get_optional_user(
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None, alias=ACCESS_TOKEN_COOKIE),
) -> AuthenticatedUser | None:
    """Dependency for pages: the signed-in user, or None."""
    token = access_token
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:]
    if not token:
        return None

    try:
        return validate_token(token)
    except Unauthorized:
        return None
