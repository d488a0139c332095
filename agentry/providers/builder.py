"""Model builder: declarative model configuration to a ready-to-call handle."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from agentry.errors import ConfigurationError
from agentry.providers.base import LLMProvider
from agentry.providers.litellm_provider import LiteLLMProvider
from agentry.utils.helpers import normalize_id

# Identical for every provider that takes an explicit thinking budget.
THINKING_BUDGETS: dict[str, int] = {"low": 1024, "medium": 4096, "high": 8192}
DEFAULT_THINKING_EFFORT = "medium"

ENV_API_KEYS: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class ThinkingConfig(_FrozenModel):
    """Reasoning ("thinking") policy for models that support it."""

    enabled: bool = False
    return_thinking: bool = Field(default=False, alias="return")
    send_thinking: bool = Field(default=False, alias="send")
    effort: Literal["low", "medium", "high"] | None = None
    budget_tokens: int | None = Field(default=None, gt=0, le=100_000)

    @field_validator("effort", mode="before")
    @classmethod
    def _normalize_effort(cls, value: Any) -> Any:
        if value is None:
            return None
        return normalize_id(value).lower()


class AnthropicOptions(_FrozenModel):
    """Anthropic-only request options."""

    version: str | None = None
    beta: str | None = None
    cache_system_messages: bool = False
    cache_tools: bool = False


class GoogleOptions(_FrozenModel):
    """Gemini-only request options."""

    safety_settings: list[dict[str, Any]] | None = None
    response_logprobs: bool = False
    logprobs: int | None = Field(default=None, ge=0, le=10)


class OpenAIOptions(_FrozenModel):
    """OpenAI-only request options."""

    organization_id: str | None = None
    project_id: str | None = None
    max_completion_tokens: int | None = Field(default=None, gt=0, le=100_000)
    logit_bias: dict[str, int] | None = None
    user: str | None = None
    parallel_tool_calls: bool | None = None
    store: bool | None = None
    metadata: dict[str, str] | None = None
    service_tier: str | None = None


class ModelConfig(_FrozenModel):
    """
    Declarative configuration for one model.

    Common parameters apply to every provider; the ``anthropic``, ``google``
    and ``openai`` blocks only apply when building for that provider.
    """

    provider: str | None = None
    model_name: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    top_p: float | None = Field(default=None, ge=0, le=1)
    top_k: int | None = Field(default=None, gt=0, le=1000)
    max_tokens: int | None = Field(default=None, gt=0, le=100_000)
    seed: int | None = None
    frequency_penalty: float | None = Field(default=None, ge=-2, le=2)
    presence_penalty: float | None = Field(default=None, ge=-2, le=2)
    max_retries: int | None = Field(default=None, ge=0, le=10)
    timeout: float | None = Field(default=None, gt=0, le=600)
    log_requests: bool = False
    log_responses: bool = False
    stop_sequences: list[str] | None = None
    thinking: ThinkingConfig | None = None
    anthropic: AnthropicOptions | None = None
    google: GoogleOptions | None = None
    openai: OpenAIOptions | None = None

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: Any) -> Any:
        if value is None:
            return None
        return normalize_provider(value)


ModelBuilderFn = Callable[[ModelConfig], LLMProvider]


def normalize_provider(tag: Any) -> str:
    """Canonical provider tag: ``"OpenAI"``, ``":openai"`` -> ``"openai"``."""
    return normalize_id(tag).lower()


def thinking_budget(thinking: ThinkingConfig) -> int:
    """Token budget for a thinking policy; an explicit budget wins over effort."""
    if thinking.budget_tokens is not None:
        return thinking.budget_tokens
    return THINKING_BUDGETS[thinking.effort or DEFAULT_THINKING_EFFORT]


def _common_params(config: ModelConfig) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if config.temperature is not None:
        params["temperature"] = config.temperature
    if config.top_p is not None:
        params["top_p"] = config.top_p
    if config.stop_sequences:
        params["stop"] = list(config.stop_sequences)
    if config.max_retries is not None:
        params["num_retries"] = config.max_retries
    if config.timeout is not None:
        params["timeout"] = config.timeout
    if config.max_tokens is not None:
        params["max_tokens"] = config.max_tokens
    return params


def _sampling_params(config: ModelConfig) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if config.seed is not None:
        params["seed"] = config.seed
    if config.frequency_penalty is not None:
        params["frequency_penalty"] = config.frequency_penalty
    if config.presence_penalty is not None:
        params["presence_penalty"] = config.presence_penalty
    return params


def _handle(model: str, config: ModelConfig, params: dict[str, Any], **kwargs: Any) -> LiteLLMProvider:
    thinking = config.thinking or ThinkingConfig()
    return LiteLLMProvider(
        model=model,
        api_key=config.api_key,
        api_base=config.base_url,
        params=params,
        log_requests=config.log_requests,
        log_responses=config.log_responses,
        send_thinking=thinking.send_thinking,
        return_thinking=thinking.return_thinking,
        **kwargs,
    )


def build_anthropic_model(config: ModelConfig) -> LLMProvider:
    """Build a handle for Anthropic Claude models."""
    params = _common_params(config)
    if config.top_k is not None:
        params["top_k"] = config.top_k
    if config.thinking and config.thinking.enabled:
        budget = thinking_budget(config.thinking)
        # Anthropic requires the thinking budget to stay below max_tokens.
        if config.max_tokens is not None and budget >= config.max_tokens:
            logger.warning(
                f"Thinking budget {budget} is not below max_tokens {config.max_tokens} "
                f"for {config.model_name}; clamping to {config.max_tokens - 1}"
            )
            budget = config.max_tokens - 1
        if not config.thinking.send_thinking:
            logger.warning(
                f"Thinking is enabled for {config.model_name} without send_thinking; "
                "tool-call follow-ups will be rejected"
            )
        params["thinking"] = {"type": "enabled", "budget_tokens": budget}

    options = config.anthropic or AnthropicOptions()
    headers: dict[str, str] = {}
    if options.version:
        headers["anthropic-version"] = options.version
    if options.beta:
        headers["anthropic-beta"] = options.beta
    if headers:
        params["extra_headers"] = headers

    return _handle(
        f"anthropic/{config.model_name}",
        config,
        params,
        cache_system_messages=options.cache_system_messages,
        cache_tools=options.cache_tools,
    )


def build_google_model(config: ModelConfig) -> LLMProvider:
    """Build a handle for Google Gemini models."""
    params = _common_params(config)
    params.update(_sampling_params(config))
    if config.top_k is not None:
        params["top_k"] = config.top_k
    if config.thinking and config.thinking.enabled:
        params["thinking"] = {"type": "enabled", "budget_tokens": thinking_budget(config.thinking)}

    options = config.google or GoogleOptions()
    if options.safety_settings:
        params["safety_settings"] = options.safety_settings
    if options.response_logprobs:
        params["logprobs"] = True
    if options.logprobs is not None:
        params["top_logprobs"] = options.logprobs

    return _handle(f"gemini/{config.model_name}", config, params)


def build_openai_model(config: ModelConfig) -> LLMProvider:
    """Build a handle for OpenAI chat and reasoning models."""
    params = _common_params(config)
    params.update(_sampling_params(config))
    if config.thinking and config.thinking.effort:
        params["reasoning_effort"] = config.thinking.effort

    options = config.openai or OpenAIOptions()
    if options.organization_id:
        params["organization"] = options.organization_id
    if options.project_id:
        params["extra_headers"] = {"OpenAI-Project": options.project_id}
    for field_name in (
        "max_completion_tokens",
        "logit_bias",
        "user",
        "parallel_tool_calls",
        "store",
        "metadata",
        "service_tier",
    ):
        value = getattr(options, field_name)
        if value is not None:
            params[field_name] = value

    return _handle(f"openai/{config.model_name}", config, params)


_BUILDERS: dict[str, ModelBuilderFn] = {
    "anthropic": build_anthropic_model,
    "google": build_google_model,
    "openai": build_openai_model,
}


def register_provider(tag: Any, builder: ModelBuilderFn, env_var: str | None = None) -> None:
    """
    Register a builder for an additional provider tag.

    Args:
        tag: Provider tag, e.g. ``"ollama"``.
        builder: Callable turning a resolved ``ModelConfig`` into a handle.
        env_var: Optional well-known environment variable for the API key.
    """
    provider = normalize_provider(tag)
    _BUILDERS[provider] = builder
    if env_var:
        ENV_API_KEYS[provider] = env_var
    logger.debug(f"Model provider registered: {provider}")


def unregister_provider(tag: Any) -> None:
    """Remove a provider builder and its API key mapping."""
    provider = normalize_provider(tag)
    _BUILDERS.pop(provider, None)
    ENV_API_KEYS.pop(provider, None)


def registered_providers() -> list[str]:
    """Provider tags that currently have a builder."""
    return sorted(_BUILDERS)


def coerce_model_config(config: ModelConfig | Mapping[str, Any]) -> ModelConfig:
    """Validate a mapping into a ``ModelConfig``; validation failures become ``ConfigurationError``."""
    if isinstance(config, ModelConfig):
        return config
    try:
        return ModelConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid model configuration: {e}") from e


def ensure_api_key(config: ModelConfig) -> ModelConfig:
    """Fill in the API key from the provider's environment variable when not set explicitly."""
    if config.api_key:
        return config
    env_var = ENV_API_KEYS.get(config.provider or "")
    api_key = os.environ.get(env_var) if env_var else None
    if not api_key:
        return config
    return config.model_copy(update={"api_key": api_key})


def build_model(provider: Any, config: ModelConfig | Mapping[str, Any]) -> LLMProvider:
    """
    Build a model handle for ``provider`` from ``config``.

    A provider set inside ``config`` takes precedence over the argument. A
    missing API key is not an error here; the provider rejects the first call.

    Raises:
        ConfigurationError: Unknown provider, invalid values, or no model name.
    """
    resolved = coerce_model_config(config)
    tag = resolved.provider or (normalize_provider(provider) if provider is not None else None)
    if not tag:
        raise ConfigurationError("Model provider is required")
    builder = _BUILDERS.get(tag)
    if builder is None:
        raise ConfigurationError(f"Unknown provider: {tag} (registered: {', '.join(registered_providers())})")
    if not resolved.model_name:
        raise ConfigurationError(f"model_name is required to build a {tag} model")

    resolved = ensure_api_key(resolved.model_copy(update={"provider": tag}))
    if not resolved.api_key:
        logger.debug(f"No API key configured for {tag}; the first request will fail to authenticate")
    logger.debug(f"Building {tag} model: {resolved.model_name}")
    return builder(resolved)
