"""
Tests for Markdown prompt logging.
"""

import pytest

from forkyes.ai import prompt_logger


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(prompt_logger, "LOG_DIR", tmp_path / "prompt_logs")
    prompt_logger.reset_session()
    yield tmp_path / "prompt_logs"
    prompt_logger.enable_prompt_logging(False)
    prompt_logger.reset_session()


class TestPromptLogger:
    def test_disabled_writes_nothing(self, log_dir):
        prompt_logger.enable_prompt_logging(False)

        path = prompt_logger.log_prompt(
            request_type="meal_suggestions",
            model="gpt-4",
            messages=[{"role": "user", "content": "hi"}],
            temperature=0.7,
            max_tokens=2000,
            response="[]",
        )

        assert path is None
        assert not log_dir.exists()

    def test_writes_markdown(self, log_dir):
        prompt_logger.enable_prompt_logging(True)

        path = prompt_logger.log_prompt(
            request_type="shopping_list",
            model="gpt-3.5-turbo",
            messages=[
                {"role": "system", "content": "You are a planner"},
                {"role": "user", "content": "List please"},
            ],
            temperature=0.3,
            max_tokens=1500,
            response='[{"name": "rice"}]',
        )

        assert path.name == "001-shopping_list.md"
        content = path.read_text(encoding="utf-8")
        assert "# Completion: shopping_list" in content
        assert "- **Model:** gpt-3.5-turbo" in content
        assert "## System" in content
        assert "List please" in content
        assert '[{"name": "rice"}]' in content

    def test_error_and_counter(self, log_dir):
        prompt_logger.enable_prompt_logging(True)
        kwargs = dict(model="gpt-4", messages=[], temperature=0.5, max_tokens=10)

        prompt_logger.log_prompt(request_type="meal_modification", response="{}", **kwargs)
        path = prompt_logger.log_prompt(request_type="meal_modification", error="timeout", **kwargs)

        assert path.name == "002-meal_modification.md"
        assert "**ERROR:** timeout" in path.read_text(encoding="utf-8")
        assert prompt_logger.get_session_log_dir() == path.parent
