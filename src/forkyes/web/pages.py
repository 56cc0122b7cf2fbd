"""
Page routes.

The frontend is a separate app; the backend only decides where a visitor
lands. Signed-in visitors skip the landing page, visitors without a
family go to onboarding.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from forkyes.db.client import get_authenticated_client
from forkyes.errors import ForkYesError
from forkyes.services.family import get_user_family_context
from forkyes.web.auth import AuthenticatedUser, get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)


def get_landing_html() -> str:
    return '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>ForkYes - Family Meal Planning</title>
</head>
<body>
    <h1>ForkYes</h1>
    <p>AI-powered meal planning for the whole family.</p>
    <p><a href="/login">Sign in</a> or <a href="/signup">create an account</a>.</p>
</body>
</html>'''


def get_dashboard_html(display_name: str, family_name: str | None) -> str:
    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>ForkYes - Dashboard</title>
</head>
<body>
    <h1>Welcome back, {display_name}!</h1>
    <p>{family_name or "Your family"}'s meal plan is ready for this week.</p>
</body>
</html>'''


@router.get("/")
async def index(user: AuthenticatedUser | None = Depends(get_optional_user)):
    if user is not None:
        return RedirectResponse("/dashboard", status_code=307)
    return HTMLResponse(get_landing_html())


@router.get("/dashboard")
async def dashboard(user: AuthenticatedUser | None = Depends(get_optional_user)):
    """Dashboard for a signed-in user who finished onboarding."""
    if user is None:
        return RedirectResponse("/login", status_code=307)

    try:
        context = await get_user_family_context(get_authenticated_client(user.access_token))
    except ForkYesError as e:
        logger.warning(f"Dashboard family lookup failed for {user.id}: {e.message}")
        context = None

    if context is None or not context.family_id:
        return RedirectResponse("/onboarding", status_code=307)

    display_name = user.full_name or (user.email or "there").split("@")[0]
    return HTMLResponse(get_dashboard_html(display_name, context.family_name))
