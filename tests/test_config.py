from pathlib import Path

import pytest

from grocery_voice.config import Config


@pytest.fixture
def env(monkeypatch):
    for key in (
        "TELEGRAM_BOT_TOKEN", "TELEGRAM_ALLOWED_USERS", "OPENAI_API_KEY", "ANTHROPIC_API_KEY",
        "DEFAULT_LLM_PROVIDER", "MAX_TOOL_STEPS", "ASSISTANT_PROMPT_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(env):
    cfg = Config()
    assert cfg.assistant.max_steps == 5
    assert cfg.assistant.temperature == 0.2
    assert cfg.assistant.prompt_file is None
    assert cfg.openai.model == "gpt-4o-mini"
    assert cfg.default_provider == "openai"
    assert cfg.has_llm_credentials is False


def test_missing_model_key_is_not_an_error(env):
    env.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    assert Config().validate() == []


def test_validation_errors(env):
    env.setenv("MAX_TOOL_STEPS", "0")
    env.setenv("DEFAULT_LLM_PROVIDER", "gemini")

    errors = Config().validate()

    assert "TELEGRAM_BOT_TOKEN is required" in errors
    assert "MAX_TOOL_STEPS must be between 1 and 5" in errors
    assert any("gemini" in error for error in errors)


def test_allowed_users_and_prompt_file(env):
    env.setenv("TELEGRAM_ALLOWED_USERS", "12, 34,,56")
    env.setenv("ASSISTANT_PROMPT_FILE", "prompts/extra.md")
    env.setenv("ANTHROPIC_API_KEY", "key")

    cfg = Config()

    assert cfg.telegram.allowed_user_ids == frozenset({12, 34, 56})
    assert cfg.assistant.prompt_file == Path("prompts/extra.md")
    assert cfg.has_llm_credentials is True


@pytest.mark.parametrize("steps, ok", [("1", True), ("5", True), ("6", False), ("100", False)])
def test_step_bound_is_capped(env, steps, ok):
    env.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    env.setenv("MAX_TOOL_STEPS", steps)
    assert (Config().validate() == []) is ok
