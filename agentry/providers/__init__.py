"""LLM providers module."""

from agentry.providers.base import LLMProvider, LLMResponse, ToolCallRequest
from agentry.providers.builder import ModelConfig, build_model, register_provider
from agentry.providers.catalog import available_models, build_model_from_key
from agentry.providers.litellm_provider import LiteLLMProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ToolCallRequest",
    "LiteLLMProvider",
    "ModelConfig",
    "build_model",
    "build_model_from_key",
    "available_models",
    "register_provider",
]
