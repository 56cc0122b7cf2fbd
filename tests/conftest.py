"""
Pytest configuration and fixtures for ForkYes tests.
"""

import os
from types import SimpleNamespace
from typing import Any

import pytest

# Set test environment before importing forkyes modules
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-key")
os.environ["FORKYES_ENV"] = "development"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeQuery:
    """
    Chainable stand-in for a PostgREST builder.

    Every builder method (select, eq, upsert, maybe_single, ...) is
    recorded and returns the query itself; execute() looks up the
    canned result for the table or RPC.
    """

    def __init__(self, db: "FakeSupabase", name: str, kind: str, params: dict | None = None):
        self.db = db
        self.name = name
        self.kind = kind
        self.params = params
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, method: str):
        if method.startswith("__"):
            raise AttributeError(method)

        def record(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self

        return record

    def called(self, method: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    @property
    def key(self) -> str:
        return f"rpc:{self.name}" if self.kind == "rpc" else self.name

    def execute(self):
        self.db.executed.append(self)
        result = self.db.results.get(self.key, [])
        if callable(result):
            result = result(self)
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(data=result)


class FakeSupabase:
    """
    In-memory Supabase client.

    results maps a table name (or "rpc:<function>") to the data that
    execute() returns, an exception to raise, or a callable taking the
    FakeQuery.
    """

    def __init__(self, results: dict[str, Any] | None = None):
        self.results: dict[str, Any] = dict(results or {})
        self.executed: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name, "table")

    def rpc(self, function_name: str, params: dict | None = None) -> FakeQuery:
        return FakeQuery(self, function_name, "rpc", params)

    def queries(self, key: str) -> list[FakeQuery]:
        """Executed queries for a table name or "rpc:<function>"."""
        return [q for q in self.executed if q.key == key]


class FakeCompletion:
    """CompletionClient returning a canned reply and recording each call."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        request_type: str = "completion",
    ) -> str:
        self.calls.append({
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "request_type": request_type,
        })
        if self.error is not None:
            raise self.error
        return self.reply


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

FAMILY_CONTEXT_ROW = {
    "user_id": "user-1",
    "family_id": "fam-1",
    "family_name": "The Riveras",
    "user_role": "admin",
    "household_size": 4,
}

PREFERENCES_ROW = {
    "id": "pref-1",
    "family_id": "fam-1",
    "household_size": 4,
    "cooking_skill": "intermediate",
    "dietary_restrictions": ["vegetarian"],
    "dislikes": ["mushrooms"],
    "favorite_meals": ["lasagna"],
}

MEAL_ROW = {
    "id": "meal-1",
    "title": "Veggie Lasagna",
    "prep_time": 20,
    "cook_time": 45,
    "servings": 4,
    "ingredients": [
        {"name": "lasagna noodles", "amount": "12", "category": "pantry"},
        {"name": "ricotta", "amount": "2 cups", "category": "dairy"},
    ],
    "instructions": ["Boil noodles", "Layer", "Bake"],
    "tags": ["vegetarian", "italian"],
    "nutrition": {"calories": 450, "protein": "22g"},
    "rating_avg": 4.5,
    "rating_count": 12,
}


@pytest.fixture
def sample_preferences_row() -> dict:
    return dict(PREFERENCES_ROW)


@pytest.fixture
def sample_preferences():
    from forkyes.models import FamilyPreferences

    return FamilyPreferences(**PREFERENCES_ROW)


@pytest.fixture
def sample_meal():
    from forkyes.models import Meal

    return Meal(**MEAL_ROW)


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def family_db() -> FakeSupabase:
    """Store where the signed-in user has a family with preferences."""
    return FakeSupabase({
        "rpc:get_user_family_context": [dict(FAMILY_CONTEXT_ROW)],
        "family_preferences": dict(PREFERENCES_ROW),
    })


@pytest.fixture
def fake_completion() -> FakeCompletion:
    return FakeCompletion()


# ---------------------------------------------------------------------------
# Web app
# ---------------------------------------------------------------------------

@pytest.fixture
def current_user():
    from forkyes.web.auth import AuthenticatedUser

    return AuthenticatedUser(
        id="user-1",
        email="pat@example.com",
        full_name="Pat Rivera",
        access_token="test-token",
    )


@pytest.fixture
def make_api(current_user, fake_completion):
    """
    Build a TestClient whose store is the given FakeSupabase.

    Auth, store and AI service are replaced through dependency_overrides.
    """
    from fastapi.testclient import TestClient

    from forkyes.ai.service import AIService
    from forkyes.web.app import app
    from forkyes.web.auth import get_current_user
    from forkyes.web.deps import get_ai_service, get_db

    def _make(db: FakeSupabase) -> TestClient:
        app.dependency_overrides[get_current_user] = lambda: current_user
        app.dependency_overrides[get_db] = lambda: db
        app.dependency_overrides[get_ai_service] = lambda: AIService(fake_completion)
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def api(make_api, family_db):
    return make_api(family_db)
