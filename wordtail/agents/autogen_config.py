from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from autogen import LLMConfig

DEFAULT_MODEL = "gpt-4o-mini"


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class OpenAICompatibleSettings:
    model: str
    base_url: str | None
    api_key: str | None

    @property
    def effective_api_key(self) -> str | None:
        # Many OpenAI-compatible servers ignore the key but some SDKs require it.
        return self.api_key or ("ollama" if self.base_url else None)


def settings_from_env(*, default_model: str = DEFAULT_MODEL) -> OpenAICompatibleSettings:
    return OpenAICompatibleSettings(
        model=os.environ.get("OPENAI_MODEL", default_model),
        # For Ollama, typically http://127.0.0.1:11434/v1
        base_url=os.environ.get("OPENAI_BASE_URL") or None,
        api_key=os.environ.get("OPENAI_API_KEY") or None,
    )


def require_settings(*, default_model: str = DEFAULT_MODEL) -> OpenAICompatibleSettings:
    """Settings with a usable credential, or ConfigurationError."""

    s = settings_from_env(default_model=default_model)
    if not s.effective_api_key:
        raise ConfigurationError(
            "Set OPENAI_API_KEY for hosted OpenAI, or set OPENAI_BASE_URL for a local OpenAI-compatible server"
        )
    return s


def llm_config_from_env(*, default_model: str = DEFAULT_MODEL, model: str | None = None) -> LLMConfig:
    s = require_settings(default_model=default_model)

    # AG2 expects a 'config_list' similar to OAI_CONFIG_LIST.
    config: dict[str, Any] = {"model": model or s.model, "api_key": s.effective_api_key}
    if s.base_url:
        config["base_url"] = s.base_url

    return LLMConfig(config_list=[config])
