"""
Configuration
Settings read from the environment (and from a .env file via python-dotenv).

Variables:
- TALENTMATCH_LLM_PROVIDER        openai | lmstudio | ollama (default: openai)
- TALENTMATCH_LLM_MODEL           model name (default depends on provider)
- OPENAI_API_KEY                  missing/placeholder key -> mock mode
- LMSTUDIO_BASE_URL, LMSTUDIO_API_KEY
- TALENTMATCH_ENABLE_AI           true/false (default: false)
- TALENTMATCH_RATE_LIMIT_SECONDS  min delay between LLM calls (default: 1.0)
- TALENTMATCH_MAX_RETRIES         attempts per LLM call (default: 3)
- TALENTMATCH_VERBOSE             true/false (default: false)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


PROVIDERS = {"openai", "lmstudio", "ollama"}
PLACEHOLDER_API_KEYS = {"", "your_openai_api_key_here"}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = env.get(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    try:
        return float(env.get(key, default))
    except (TypeError, ValueError):
        return default


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    try:
        return int(env.get(key, default))
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    llm_provider: str = "openai"
    llm_model: Optional[str] = None
    openai_api_key: str = ""
    lmstudio_base_url: str = "http://localhost:1234/v1"
    lmstudio_api_key: str = "lmstudio"
    enable_ai: bool = False
    rate_limit_seconds: float = 1.0
    max_retries: int = 3
    verbose: bool = False

    @property
    def mock_mode(self) -> bool:
        """True when the selected backend has no usable credentials."""
        if self.llm_provider == "openai":
            return self.openai_api_key.strip() in PLACEHOLDER_API_KEYS
        return False


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[str] = None
) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (no .env loading in that case)
        dotenv_path: Explicit .env file (default: searched from the working directory)
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    provider = (env.get("TALENTMATCH_LLM_PROVIDER") or "openai").strip().lower()
    if provider not in PROVIDERS:
        raise ValueError(f"TALENTMATCH_LLM_PROVIDER must be one of {sorted(PROVIDERS)}, got '{provider}'")

    return Settings(
        llm_provider=provider,
        llm_model=env.get("TALENTMATCH_LLM_MODEL") or None,
        openai_api_key=env.get("OPENAI_API_KEY", ""),
        lmstudio_base_url=env.get("LMSTUDIO_BASE_URL") or "http://localhost:1234/v1",
        lmstudio_api_key=env.get("LMSTUDIO_API_KEY") or "lmstudio",
        enable_ai=_env_bool(env, "TALENTMATCH_ENABLE_AI", False),
        rate_limit_seconds=_env_float(env, "TALENTMATCH_RATE_LIMIT_SECONDS", 1.0),
        max_retries=_env_int(env, "TALENTMATCH_MAX_RETRIES", 3),
        verbose=_env_bool(env, "TALENTMATCH_VERBOSE", False),
    )
