"""Tests for building model handles from declarative configuration."""

import pytest
from pydantic import ValidationError

from agentry.errors import ConfigurationError
from agentry.providers.builder import (
    ModelConfig,
    ThinkingConfig,
    build_model,
    register_provider,
    registered_providers,
    thinking_budget,
    unregister_provider,
)
from agentry.providers.litellm_provider import LiteLLMProvider


@pytest.fixture(autouse=True)
def no_provider_keys(monkeypatch):
    for var in ("ANTHROPIC_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def test_build_openai_model_common_params():
    model = build_model(
        "openai",
        {
            "model_name": "gpt-4o",
            "api_key": "sk-test",
            "base_url": "http://localhost:8080/v1",
            "temperature": 0.2,
            "top_p": 0.9,
            "stop_sequences": ["END"],
            "max_retries": 2,
            "timeout": 30,
            "max_tokens": 512,
            "seed": 7,
        },
    )

    assert isinstance(model, LiteLLMProvider)
    assert model.get_default_model() == "openai/gpt-4o"
    assert model.api_key == "sk-test"
    assert model.api_base == "http://localhost:8080/v1"
    assert model.params == {
        "temperature": 0.2,
        "top_p": 0.9,
        "stop": ["END"],
        "num_retries": 2,
        "timeout": 30,
        "max_tokens": 512,
        "seed": 7,
    }


def test_openai_specific_options():
    model = build_model(
        "openai",
        {
            "model_name": "o4-mini",
            "thinking": {"effort": "high"},
            "openai": {
                "organization_id": "org-1",
                "project_id": "proj-1",
                "max_completion_tokens": 2048,
                "parallel_tool_calls": False,
                "service_tier": "flex",
            },
        },
    )

    assert model.params["reasoning_effort"] == "high"
    assert model.params["organization"] == "org-1"
    assert model.params["extra_headers"] == {"OpenAI-Project": "proj-1"}
    assert model.params["max_completion_tokens"] == 2048
    assert model.params["parallel_tool_calls"] is False
    assert model.params["service_tier"] == "flex"
    assert "thinking" not in model.params


def test_anthropic_thinking_and_headers():
    model = build_model(
        "anthropic",
        {
            "model_name": "claude-sonnet-4-20250514",
            "top_k": 40,
            "thinking": {"enabled": True, "effort": "high"},
            "anthropic": {"version": "2023-06-01", "beta": "prompt-caching-2024-07-31", "cache_tools": True},
        },
    )

    assert model.get_default_model() == "anthropic/claude-sonnet-4-20250514"
    assert model.params["thinking"] == {"type": "enabled", "budget_tokens": 8192}
    assert model.params["top_k"] == 40
    assert model.params["extra_headers"] == {
        "anthropic-version": "2023-06-01",
        "anthropic-beta": "prompt-caching-2024-07-31",
    }
    assert model.cache_tools is True
    assert model.cache_system_messages is False


def test_anthropic_thinking_budget_stays_below_max_tokens():
    model = build_model(
        "anthropic",
        {"model_name": "claude-opus-4-20250514", "max_tokens": 8192, "thinking": {"enabled": True, "budget_tokens": 8192}},
    )
    assert model.params["thinking"] == {"type": "enabled", "budget_tokens": 8191}

    roomy = build_model(
        "anthropic",
        {"model_name": "claude-opus-4-20250514", "max_tokens": 16384, "thinking": {"enabled": True, "effort": "high"}},
    )
    assert roomy.params["thinking"] == {"type": "enabled", "budget_tokens": 8192}


def test_google_specific_options():
    model = build_model(
        "google",
        {
            "model_name": "gemini-2.5-flash",
            "presence_penalty": 0.5,
            "thinking": {"enabled": True, "budget_tokens": 2000},
            "google": {
                "safety_settings": [{"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"}],
                "response_logprobs": True,
                "logprobs": 3,
            },
        },
    )

    assert model.get_default_model() == "gemini/gemini-2.5-flash"
    assert model.params["thinking"] == {"type": "enabled", "budget_tokens": 2000}
    assert model.params["presence_penalty"] == 0.5
    assert model.params["logprobs"] is True
    assert model.params["top_logprobs"] == 3
    assert model.params["safety_settings"][0]["threshold"] == "BLOCK_NONE"


def test_other_providers_options_are_ignored():
    model = build_model(
        "openai",
        {"model_name": "gpt-4o", "anthropic": {"version": "2023-06-01"}, "top_k": 5},
    )
    assert "extra_headers" not in model.params
    assert "top_k" not in model.params


@pytest.mark.parametrize(
    ("thinking", "expected"),
    [
        ({"effort": "low"}, 1024),
        ({"effort": "medium"}, 4096),
        ({"effort": "high"}, 8192),
        ({}, 4096),
        ({"effort": "low", "budget_tokens": 3000}, 3000),
    ],
)
def test_thinking_budget(thinking, expected):
    assert thinking_budget(ThinkingConfig(**thinking)) == expected


def test_thinking_aliases_and_effort_normalization():
    config = ModelConfig.model_validate(
        {"thinking": {"enabled": True, "return": True, "send": True, "effort": ":HIGH"}}
    )
    assert config.thinking.return_thinking is True
    assert config.thinking.send_thinking is True
    assert config.thinking.effort == "high"


def test_unknown_provider_is_rejected():
    with pytest.raises(ConfigurationError, match="Unknown provider: mistral"):
        build_model("mistral", {"model_name": "large"})


def test_missing_model_name_is_rejected():
    with pytest.raises(ConfigurationError, match="model_name is required"):
        build_model("openai", {"temperature": 0.5})


@pytest.mark.parametrize(
    "config",
    [
        {"model_name": "gpt-4o", "temperature": 3},
        {"model_name": "gpt-4o", "max_tokens": 0},
        {"model_name": "gpt-4o", "unknown_field": True},
        {"model_name": "gpt-4o", "thinking": {"effort": "extreme"}},
    ],
)
def test_invalid_config_is_rejected(config):
    with pytest.raises(ConfigurationError, match="Invalid model configuration"):
        build_model("openai", config)


def test_config_provider_takes_precedence():
    model = build_model("openai", {"provider": ":Anthropic", "model_name": "claude-3-5-haiku-20241022"})
    assert model.get_default_model() == "anthropic/claude-3-5-haiku-20241022"


def test_api_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-env-key")
    model = build_model("google", {"model_name": "gemini-2.5-pro"})
    assert model.api_key == "gemini-env-key"


def test_explicit_api_key_wins_over_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    model = build_model("openai", {"model_name": "gpt-4o", "api_key": "explicit"})
    assert model.api_key == "explicit"


def test_missing_api_key_is_not_fatal():
    model = build_model("anthropic", {"model_name": "claude-sonnet-4-20250514"})
    assert model.api_key is None


def test_config_is_immutable():
    config = ModelConfig(model_name="gpt-4o")
    with pytest.raises(ValidationError):
        config.temperature = 0.1


def test_register_additional_provider(monkeypatch):
    monkeypatch.setenv("OLLAMA_API_KEY", "local")
    built = []

    def build_ollama(config):
        built.append(config)
        return LiteLLMProvider(model=f"ollama/{config.model_name}", api_key=config.api_key)

    register_provider(":ollama", build_ollama, env_var="OLLAMA_API_KEY")
    try:
        assert "ollama" in registered_providers()
        model = build_model("ollama", {"model_name": "llama3"})
        assert model.get_default_model() == "ollama/llama3"
        assert built[0].api_key == "local"
        # existing providers are untouched
        assert build_model("openai", {"model_name": "gpt-4o"}).get_default_model() == "openai/gpt-4o"
    finally:
        unregister_provider("ollama")

    assert "ollama" not in registered_providers()
    with pytest.raises(ConfigurationError):
        build_model("ollama", {"model_name": "llama3"})
