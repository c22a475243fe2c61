"""
Test Configuration
"""

import pytest

from talentmatch.config import Settings, load_settings


def test_defaults_from_empty_environment():
    settings = load_settings(env={})

    assert settings == Settings()
    assert settings.llm_provider == "openai"
    assert settings.enable_ai is False
    assert settings.rate_limit_seconds == 1.0
    assert settings.max_retries == 3
    assert settings.mock_mode is True


def test_values_are_read_from_environment():
    settings = load_settings(env={
        "TALENTMATCH_LLM_PROVIDER": "LMStudio",
        "TALENTMATCH_LLM_MODEL": "qwen2.5-7b-instruct",
        "LMSTUDIO_BASE_URL": "http://gpu-box:1234/v1",
        "TALENTMATCH_ENABLE_AI": "yes",
        "TALENTMATCH_RATE_LIMIT_SECONDS": "0.25",
        "TALENTMATCH_MAX_RETRIES": "5",
        "TALENTMATCH_VERBOSE": "1",
    })

    assert settings.llm_provider == "lmstudio"
    assert settings.llm_model == "qwen2.5-7b-instruct"
    assert settings.lmstudio_base_url == "http://gpu-box:1234/v1"
    assert settings.enable_ai is True
    assert settings.rate_limit_seconds == 0.25
    assert settings.max_retries == 5
    assert settings.verbose is True
    assert settings.mock_mode is False


def test_invalid_numbers_fall_back_to_defaults():
    settings = load_settings(env={
        "TALENTMATCH_RATE_LIMIT_SECONDS": "fast",
        "TALENTMATCH_MAX_RETRIES": "many",
    })
    assert settings.rate_limit_seconds == 1.0
    assert settings.max_retries == 3


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        load_settings(env={"TALENTMATCH_LLM_PROVIDER": "bard"})


@pytest.mark.parametrize("key, mock", [
    ("", True),
    ("your_openai_api_key_here", True),
    ("sk-live", False),
])
def test_mock_mode_follows_openai_key(key, mock):
    assert Settings(openai_api_key=key).mock_mode is mock


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    # register the variable so monkeypatch removes it afterwards
    monkeypatch.setenv("TALENTMATCH_LLM_MODEL", "")
    monkeypatch.delenv("TALENTMATCH_LLM_MODEL")
    dotenv = tmp_path / ".env"
    dotenv.write_text("TALENTMATCH_LLM_MODEL=gpt-4o-mini\n", encoding="utf-8")

    settings = load_settings(dotenv_path=str(dotenv))

    assert settings.llm_model == "gpt-4o-mini"
