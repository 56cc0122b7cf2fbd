"""
Tests for the store-backed services: preferences loading, family
management and meal/week plan operations.
"""

import asyncio
from datetime import date

import pytest

from conftest import MEAL_ROW, PREFERENCES_ROW, FakeSupabase
from forkyes.errors import FamilyMissing, NotFound, PreferencesMissing, StoreUnavailable
from forkyes.models import PlannedMeal, ShoppingListItem
from forkyes.services import family as family_service
from forkyes.services import meals as meal_service
from forkyes.services.preferences import load_preferences, resolve_family_context


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class StoreError(Exception):
    """Mimics postgrest.APIError, which carries .message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

class TestPreferenceLoading:
    def test_resolve_family_context(self, family_db):
        context = _run(resolve_family_context(family_db))

        assert context.family_id == "fam-1"
        assert family_db.queries("rpc:get_user_family_context")[0].params == {}

    def test_no_family(self):
        db = FakeSupabase({"rpc:get_user_family_context": []})

        with pytest.raises(FamilyMissing) as exc_info:
            _run(resolve_family_context(db))

        assert exc_info.value.status_code == 400

    def test_row_without_family_id(self):
        db = FakeSupabase({"rpc:get_user_family_context": [{"user_id": "user-1", "family_id": None}]})

        with pytest.raises(FamilyMissing):
            _run(resolve_family_context(db))

    def test_load_preferences(self, family_db):
        prefs = _run(load_preferences(family_db, "fam-1"))

        assert prefs.household_size == 4
        assert prefs.dietary_restrictions == ["vegetarian"]
        query = family_db.queries("family_preferences")[0]
        assert query.called("eq") == [(("family_id", "fam-1"), {})]
        assert query.called("maybe_single")

    def test_missing_preferences_not_defaulted(self):
        db = FakeSupabase({"family_preferences": None})

        with pytest.raises(PreferencesMissing) as exc_info:
            _run(load_preferences(db, "fam-1"))

        assert "complete onboarding" in exc_info.value.message

    def test_store_failure(self):
        db = FakeSupabase({"family_preferences": StoreError("connection refused")})

        with pytest.raises(StoreUnavailable) as exc_info:
            _run(load_preferences(db, "fam-1"))

        assert exc_info.value.message == "connection refused"
        assert exc_info.value.status_code == 500

    def test_null_lists_and_duplicates(self):
        row = {**PREFERENCES_ROW, "dislikes": None, "favorite_meals": ["tacos", "tacos ", ""]}
        db = FakeSupabase({"family_preferences": row})

        prefs = _run(load_preferences(db, "fam-1"))

        assert prefs.dislikes == []
        assert prefs.favorite_meals == ["tacos"]


# ---------------------------------------------------------------------------
# Family
# ---------------------------------------------------------------------------

class TestFamilyService:
    def test_create_family(self):
        db = FakeSupabase({
            "rpc:create_family_with_admin": "fam-9",
            "families": {"id": "fam-9", "name": "The Parks"},
        })

        family = _run(family_service.create_family(db, "The Parks"))

        assert family.id == "fam-9"
        assert db.queries("rpc:ensure_user_record")
        assert db.queries("rpc:create_family_with_admin")[0].params == {"family_name": "The Parks"}

    def test_create_family_survives_ensure_user_failure(self):
        db = FakeSupabase({
            "rpc:ensure_user_record": StoreError("already exists"),
            "rpc:create_family_with_admin": "fam-9",
            "families": {"id": "fam-9", "name": "The Parks"},
        })

        assert _run(family_service.create_family(db, "The Parks")).name == "The Parks"

    def test_create_family_row_missing(self):
        db = FakeSupabase({"rpc:create_family_with_admin": "fam-9", "families": None})

        with pytest.raises(NotFound):
            _run(family_service.create_family(db, "The Parks"))

    def test_join_family(self, fake_db):
        _run(family_service.join_family(fake_db, "fam-2", "child"))

        assert fake_db.queries("rpc:join_family")[0].params == {
            "invite_family_id": "fam-2",
            "user_role": "child",
        }

    def test_context_none_without_rows(self, fake_db):
        assert _run(family_service.get_user_family_context(fake_db)) is None

    def test_update_preferences_strips_metadata(self):
        db = FakeSupabase({"family_preferences": [dict(PREFERENCES_ROW, household_size=5)]})

        prefs = _run(family_service.update_family_preferences(
            db, "fam-1", {"id": "x", "family_id": "other", "household_size": 5}
        ))

        assert prefs.household_size == 5
        args, kwargs = db.queries("family_preferences")[0].called("upsert")[0]
        assert args[0] == {"family_id": "fam-1", "household_size": 5}
        assert kwargs == {"on_conflict": "family_id"}

    def test_members_and_role(self):
        db = FakeSupabase({"users": [{"id": "user-1", "family_id": "fam-1", "role": "admin"}]})

        members = _run(family_service.get_family_members(db, "fam-1"))
        _run(family_service.update_user_role(db, "user-2", "child"))

        assert [m.role for m in members] == ["admin"]
        update = db.queries("users")[1]
        assert update.called("update") == [(({"role": "child"},), {})]


# ---------------------------------------------------------------------------
# Meals and week plans
# ---------------------------------------------------------------------------

class TestMealService:
    def test_week_start_for(self):
        assert meal_service.week_start_for(date(2024, 5, 16)) == date(2024, 5, 13)
        assert meal_service.week_start_for(date(2024, 5, 13)) == date(2024, 5, 13)
        assert meal_service.week_start_for(date(2024, 5, 19)) == date(2024, 5, 13)

    def test_recommended_meals_params(self):
        db = FakeSupabase({"rpc:get_recommended_meals": [
            {"meal_id": "meal-1", "title": "Veggie Lasagna", "matches_preferences": True},
        ]})

        meals = _run(meal_service.get_recommended_meals(db, exclude_rated=True, limit=5))

        assert meals[0].matches_preferences is True
        assert db.queries("rpc:get_recommended_meals")[0].params == {
            "exclude_rated": True,
            "limit_count": 5,
        }

    def test_search_filters(self):
        db = FakeSupabase({"meals": [MEAL_ROW]})

        meals = _run(meal_service.search_meals(db, "lasagna", tags=["italian"], max_prep_time=30))

        assert meals[0].title == "Veggie Lasagna"
        query = db.queries("meals")[0]
        assert query.called("or_") == [(('title.ilike."%lasagna%",tags.cs.{"lasagna"}',), {})]
        assert query.called("ov") == [(("tags", ["italian"]), {})]
        assert query.called("lte") == [(("prep_time", 30), {})]
        assert query.called("order") == [(("rating_avg",), {"desc": True})]

    def test_search_term_with_filter_syntax_is_quoted(self):
        db = FakeSupabase({"meals": []})

        _run(meal_service.search_meals(db, 'mac, "cheese")'))

        (filter_string,), _ = db.queries("meals")[0].called("or_")[0]
        assert filter_string == (
            'title.ilike."%mac, \\"cheese\\")%",'
            'tags.cs.{"mac, \\"cheese\\")"}'
        )

    def test_search_without_filters(self):
        db = FakeSupabase({"meals": []})

        assert _run(meal_service.search_meals(db, "soup")) == []
        query = db.queries("meals")[0]
        assert not query.called("ov")
        assert not query.called("lte")

    def test_get_meal_missing(self):
        db = FakeSupabase({"meals": None})

        assert _run(meal_service.get_meal(db, "nope")) is None

    def test_rate_meal_upserts(self):
        row = {"id": "r-1", "family_id": "fam-1", "meal_id": "meal-1", "rating": 5}
        db = FakeSupabase({"meal_ratings": [row]})

        rating = _run(meal_service.rate_meal(db, "fam-1", "meal-1", 5, kid_approved=True))

        assert rating.rating == 5
        args, kwargs = db.queries("meal_ratings")[0].called("upsert")[0]
        assert args[0]["kid_approved"] is True
        assert kwargs == {"on_conflict": "family_id,meal_id"}

    def test_week_plan_absent_is_none(self):
        db = FakeSupabase({"week_plans": None})

        assert _run(meal_service.get_week_plan(db, "fam-1", date(2024, 5, 13))) is None

    def test_save_week_plan(self):
        row = {"id": "plan-1", "family_id": "fam-1", "week_start": "2024-05-13", "status": "confirmed"}
        db = FakeSupabase({"week_plans": [row]})
        meals = [PlannedMeal(day="monday", meal_type="dinner", meal_id="meal-1", servings=4)]

        plan = _run(meal_service.save_week_plan(db, "fam-1", date(2024, 5, 13), meals, "confirmed"))

        assert plan.week_start == date(2024, 5, 13)
        args, kwargs = db.queries("week_plans")[0].called("upsert")[0]
        assert args[0]["week_start"] == "2024-05-13"
        assert args[0]["meals"][0]["meal_id"] == "meal-1"
        assert "shopping_list" not in args[0]
        assert kwargs == {"on_conflict": "family_id,week_start"}

    def test_add_item_starts_draft_plan(self):
        def week_plans(query):
            if query.called("upsert"):
                record = query.called("upsert")[0][0][0]
                return [{"id": "plan-1", **record}]
            return None

        db = FakeSupabase({"week_plans": week_plans})

        plan = _run(meal_service.add_shopping_list_item(
            db, "fam-1", date(2024, 5, 13), ShoppingListItem(name="milk", quantity="1 gal")
        ))

        assert plan.status == "draft"
        assert [item.name for item in plan.shopping_list] == ["milk"]

    def test_add_item_keeps_existing_items(self):
        existing = {
            "id": "plan-1",
            "family_id": "fam-1",
            "week_start": "2024-05-13",
            "status": "confirmed",
            "shopping_list": [{"name": "rice", "checked": True}],
        }

        def week_plans(query):
            if query.called("upsert"):
                return [{"id": "plan-1", **query.called("upsert")[0][0][0]}]
            return existing

        db = FakeSupabase({"week_plans": week_plans})

        plan = _run(meal_service.add_shopping_list_item(
            db, "fam-1", date(2024, 5, 13), ShoppingListItem(name="milk")
        ))

        assert plan.status == "confirmed"
        assert [(item.name, item.checked) for item in plan.shopping_list] == [
            ("rice", True),
            ("milk", False),
        ]

    def test_generate_shopping_list(self, fake_db):
        _run(meal_service.generate_shopping_list(fake_db, "plan-1"))

        assert fake_db.queries("rpc:generate_shopping_list_from_plan")[0].params == {"plan_id": "plan-1"}

    def test_week_stats(self):
        plan_row = {
            "id": "plan-1",
            "family_id": "fam-1",
            "week_start": "2024-05-13",
            "status": "confirmed",
            "meals": [
                {"day": "monday", "meal_type": "dinner", "meal_id": "meal-1"},
                {"day": "tuesday", "meal_type": "dinner", "meal_id": "meal-2"},
            ],
            "shopping_list": [
                {"name": "milk", "checked": True},
                {"name": "rice"},
                {"name": "tofu"},
            ],
        }

        def week_plans(query):
            if query.called("maybe_single"):
                return plan_row
            return [{"id": "plan-1"}, {"id": "plan-0"}]

        db = FakeSupabase({
            "week_plans": week_plans,
            "meal_ratings": [{"id": "r-1"}, {"id": "r-2"}, {"id": "r-3"}],
        })

        plan, stats = _run(meal_service.get_week_stats(db, "fam-1", date(2024, 5, 13)))

        assert plan.id == "plan-1"
        assert stats.plan_status == "confirmed"
        assert stats.planned_meals == 2
        assert stats.shopping_items == 3
        assert stats.checked_items == 1
        assert stats.ratings_count == 3
        assert stats.recent_plans == 2

    def test_week_stats_without_plan(self):
        def week_plans(query):
            return None if query.called("maybe_single") else []

        db = FakeSupabase({"week_plans": week_plans})

        plan, stats = _run(meal_service.get_week_stats(db, "fam-1", date(2024, 5, 13)))

        assert plan is None
        assert stats.plan_status is None
        assert stats.shopping_items == 0

    def test_week_stats_store_failure(self):
        db = FakeSupabase({"meal_ratings": StoreError("timeout")})

        with pytest.raises(StoreUnavailable, match="timeout"):
            _run(meal_service.get_week_stats(db, "fam-1", date(2024, 5, 13)))
