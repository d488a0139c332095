"""Building agents from declarative agent specs."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence

from loguru import logger

from agentry.agent.context import build_context_strings
from agentry.agent.general import GeneralAgent
from agentry.agent.tools.bridge import BridgedTool
from agentry.config.schema import AgentSpec, Config
from agentry.control.default_agents import default_agent_ids, make_default_agents, merge_tool_config_into_agent
from agentry.control.tool_filter import filter_tools
from agentry.errors import ConfigurationError
from agentry.providers.base import LLMProvider
from agentry.providers.builder import ENV_API_KEYS
from agentry.providers.catalog import build_model_from_key

ModelFactory = Callable[[str], LLMProvider]

# Order in which providers are tried when an agent names no model.
PROVIDER_PREFERENCE = ("anthropic", "google", "openai")


def configured_agents(config: Config) -> list[AgentSpec]:
    """
    Default agents with their ``tools_config`` overrides, plus user agents.

    A user agent with the same id as a default replaces it.
    """
    defaults = [
        merge_tool_config_into_agent(spec, config.get_tool_config(spec.id, spec.tool_name))
        for spec in make_default_agents()
    ]
    merged: dict[str, AgentSpec] = {spec.id: spec for spec in defaults}
    for spec in config.agents:
        merged[spec.id] = spec

    builtin = default_agent_ids()
    n_defaults = sum(1 for agent_id in merged if agent_id in builtin)
    logger.debug(f"{len(merged)} agents configured ({n_defaults} defaults, {len(merged) - n_defaults} user-defined)")
    return list(merged.values())


def default_model_key(config: Config) -> str:
    """
    Model key for agents that name no model: the first provider with an API key in the environment.

    Raises:
        ConfigurationError: No provider key is set.
    """
    for provider in PROVIDER_PREFERENCE:
        env_var = ENV_API_KEYS.get(provider)
        model_key = config.defaults.models.get(provider)
        if env_var and model_key and os.environ.get(env_var):
            return model_key
    wanted = ", ".join(ENV_API_KEYS[p] for p in PROVIDER_PREFERENCE if p in ENV_API_KEYS)
    raise ConfigurationError(f"No model configured: set a model for the agent or one of {wanted}")


def model_factory_for(config: Config) -> ModelFactory:
    """Factory resolving model keys against the user's models, then the built-in catalog."""

    def build(model_key: str) -> LLMProvider:
        return build_model_from_key(model_key, user_models=config.models)

    return build


def build_agent_from_spec(
    spec: AgentSpec,
    tools: Sequence[BridgedTool],
    config: Config,
    model_factory: ModelFactory | None = None,
) -> GeneralAgent:
    """
    Build a ``GeneralAgent`` for ``spec``.

    ``enable_tools`` of ``None`` gives the agent no tools; ``"all"`` gives it
    every tool in ``tools`` except the disabled ones.

    Raises:
        ConfigurationError: The model cannot be resolved or the spec is invalid.
    """
    factory = model_factory or model_factory_for(config)
    agent_tools = filter_tools(tools, spec.enable_tools, spec.disable_tools)
    context = build_context_strings(config.working_path, spec.context)
    model = factory(spec.model or default_model_key(config))

    logger.info(
        f"Building agent '{spec.tool_name}' with {len(agent_tools)} tools"
        + (f" and memory_size: {spec.memory_size}" if spec.memory_size else " (stateless)")
    )
    return GeneralAgent(
        model=model,
        system_prompt=spec.system_message,
        tools=agent_tools,
        context=context,
        memory_size=spec.memory_size,
        max_round_trips=config.defaults.max_round_trips,
        name=spec.tool_name,
    )
