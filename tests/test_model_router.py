"""
Tests for per-request-type model selection.
"""

from unittest.mock import MagicMock

import pytest

from forkyes.ai.model_router import REQUEST_CONFIGS, get_request_config


class TestModelRouter:
    """Budgets per request type and settings overrides."""

    def test_defaults(self):
        assert get_request_config("meal_suggestions") == {
            "model": "gpt-4", "temperature": 0.7, "max_tokens": 2000,
        }
        assert get_request_config("shopping_list") == {
            "model": "gpt-3.5-turbo", "temperature": 0.3, "max_tokens": 1500,
        }
        assert get_request_config("meal_modification") == {
            "model": "gpt-4", "temperature": 0.5, "max_tokens": 1500,
        }

    def test_suggestions_warmer_than_shopping(self):
        assert REQUEST_CONFIGS["meal_suggestions"]["temperature"] > REQUEST_CONFIGS["shopping_list"]["temperature"]

    def test_override_replaces_model_only(self):
        settings = MagicMock(suggestion_model=None, shopping_model="gpt-4o-mini", modification_model="")

        config = get_request_config("shopping_list", settings)

        assert config["model"] == "gpt-4o-mini"
        assert config["temperature"] == 0.3
        assert get_request_config("meal_suggestions", settings)["model"] == "gpt-4"
        assert get_request_config("meal_modification", settings)["model"] == "gpt-4"

    def test_returns_copy(self):
        config = get_request_config("meal_suggestions")
        config["model"] = "changed"

        assert REQUEST_CONFIGS["meal_suggestions"]["model"] == "gpt-4"

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            get_request_config("dessert")
