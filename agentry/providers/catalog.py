"""Named model defaults keyed ``provider/name``."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from loguru import logger

from agentry.errors import ConfigurationError
from agentry.providers.base import LLMProvider
from agentry.providers.builder import build_model, normalize_provider

MODEL_BASE: dict[str, Any] = {
    "temperature": 1,
    "max_tokens": 4096,
    "max_retries": 3,
    "timeout": 60,
}

REASONING_MODEL_BASE: dict[str, Any] = {
    "temperature": 1,
    "max_tokens": 8192,
    "max_retries": 3,
    "timeout": 120,
}

THINKING_BASE: dict[str, Any] = {
    "enabled": True,
    "return": True,
    "send": True,
    "effort": "medium",
}


def _standard(model_name: str, **extra: Any) -> dict[str, Any]:
    return {**MODEL_BASE, "model_name": model_name, **extra}


def _reasoning(model_name: str, max_tokens: int | None = None, **thinking: Any) -> dict[str, Any]:
    config = {**REASONING_MODEL_BASE, "model_name": model_name, "thinking": {**THINKING_BASE, **thinking}}
    if max_tokens is not None:
        config["max_tokens"] = max_tokens
    return config


def _effort_only(model_name: str) -> dict[str, Any]:
    return _standard(model_name, thinking={"effort": "medium"})


DEFAULT_MODEL_CONFIGS: dict[str, dict[str, Any]] = {
    # OpenAI
    "openai/gpt-4o": _standard("gpt-4o"),
    "openai/gpt-4-1": _standard("gpt-4.1"),
    "openai/gpt-4-1-mini": _standard("gpt-4.1-mini"),
    "openai/gpt-4-1-nano": _standard("gpt-4.1-nano"),
    "openai/gpt-5": _effort_only("gpt-5-2025-08-07"),
    "openai/gpt-5-mini": _effort_only("gpt-5-mini-2025-08-07"),
    "openai/gpt-5-nano": _effort_only("gpt-5-nano-2025-08-07"),
    "openai/o1": _effort_only("o1"),
    "openai/o1-mini": _effort_only("o1-mini"),
    "openai/o3": _effort_only("o3"),
    "openai/o3-mini": _effort_only("o3-mini"),
    "openai/o3-pro": _effort_only("o3-pro-2025-06-10"),
    "openai/o4-mini": _standard("o4-mini"),
    "openai/o4-mini-reasoning": _effort_only("o4-mini"),
    # Google
    "google/gemini-2-5-flash-lite": _standard("gemini-2.5-flash-lite"),
    "google/gemini-2-5-pro": _standard("gemini-2.5-pro"),
    "google/gemini-2-5-flash": _standard("gemini-2.5-flash"),
    "google/gemini-2-5-flash-reasoning": _standard("gemini-2.5-flash", thinking=dict(THINKING_BASE)),
    "google/gemini-2-5-pro-reasoning": _standard("gemini-2.5-pro", thinking=dict(THINKING_BASE)),
    # Anthropic
    "anthropic/claude-opus-4-1": _standard("claude-opus-4-1-20250805"),
    "anthropic/claude-opus-4-1-reasoning": _reasoning("claude-opus-4-1-20250805", max_tokens=16384, budget_tokens=8192),
    "anthropic/claude-opus-4": _standard("claude-opus-4-20250514"),
    "anthropic/claude-opus-4-reasoning": _reasoning("claude-opus-4-20250514", max_tokens=16384, budget_tokens=8192),
    "anthropic/claude-3-5-haiku": _standard("claude-3-5-haiku-20241022", max_tokens=2048),
    "anthropic/claude-sonnet-4": _standard("claude-sonnet-4-20250514"),
    "anthropic/claude-sonnet-4-reasoning": _reasoning("claude-sonnet-4-20250514", budget_tokens=4096),
}


def available_models() -> list[str]:
    """Model keys that ship with default configurations."""
    return list(DEFAULT_MODEL_CONFIGS)


def provider_of(model_key: str) -> str:
    """Provider tag of a ``provider/name`` key."""
    provider, sep, name = model_key.partition("/")
    if not sep or not provider or not name:
        raise ConfigurationError(f"Model key must look like 'provider/name': {model_key!r}")
    return normalize_provider(provider)


def merge_with_defaults(model_key: str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Named defaults for ``model_key`` with ``overrides`` on top; the override wins."""
    merged = dict(DEFAULT_MODEL_CONFIGS.get(model_key, {}))
    merged.update(overrides or {})
    return merged


def _is_env_ref(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) == 1 and isinstance(value.get("env"), str)


def resolve_env_refs(value: Any) -> Any:
    """
    Replace ``{"env": "NAME"}`` references with the environment variable's value.

    Nested mappings and lists are processed recursively. An unset variable
    resolves to ``None``; values always come back as strings.
    """
    if _is_env_ref(value):
        return os.environ.get(value["env"])
    if isinstance(value, Mapping):
        return {k: resolve_env_refs(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [resolve_env_refs(v) for v in value]
    return value


def build_model_from_key(
    model_key: str,
    overrides: Mapping[str, Any] | None = None,
    user_models: Mapping[str, Mapping[str, Any]] | None = None,
) -> LLMProvider:
    """
    Build a model handle from a named model key.

    User-defined models are consulted first, then the built-in defaults.

    Raises:
        ConfigurationError: The key is unknown or the resulting config is invalid.
    """
    if user_models and model_key in user_models:
        base = dict(user_models[model_key])
        source = "user config"
    elif model_key in DEFAULT_MODEL_CONFIGS:
        base = dict(DEFAULT_MODEL_CONFIGS[model_key])
        source = "defaults"
    else:
        raise ConfigurationError(f"Unknown model key: {model_key}")

    config = resolve_env_refs({**base, **resolve_env_refs(dict(overrides or {}))})
    if not config.get("provider"):
        config["provider"] = provider_of(model_key)
    logger.debug(f"Resolved model {model_key} from {source}")
    return build_model(config["provider"], config)
