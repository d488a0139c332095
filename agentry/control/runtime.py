"""Host runtime: tool catalog, configured agents and the agent cache."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loguru import logger

from agentry.agent.context import build_context_strings
from agentry.agent.general import ChatResult, GeneralAgent, ToolLike
from agentry.agent.tools.bridge import BridgedTool, ToolCallback, ToolRegistration, to_callables
from agentry.config.schema import AgentSpec, Config
from agentry.control.agent_builder import ModelFactory, build_agent_from_spec, configured_agents
from agentry.control.cache import AgentCache
from agentry.control.tool_filter import tool_id_enabled
from agentry.control.tool_loader import load_tool_registrations
from agentry.errors import ConfigurationError
from agentry.utils.helpers import normalize_id

AGENT_TOOL_SCHEMA = {
    "type": "object",
    "properties": {
        "prompt": {"type": "string", "description": "The prompt to send to the agent"},
    },
    "required": ["prompt"],
}


class AgentRuntime:
    """
    Owns the host tool catalog, the configured agents and their cache.

    Agents are built lazily on first use and kept until invalidated; their
    context is recomputed before every chat.
    """

    def __init__(
        self,
        config: Config | None = None,
        tools: Iterable[ToolLike] = (),
        model_factory: ModelFactory | None = None,
    ) -> None:
        self.config = config or Config()
        self.cache = AgentCache()
        self._model_factory = model_factory
        self._tools: list[BridgedTool] = []
        self.register_tools(tools)

    @classmethod
    def from_config(
        cls,
        config: Config,
        tools: Iterable[ToolLike] = (),
        model_factory: ModelFactory | None = None,
    ) -> AgentRuntime:
        """Create a runtime with ``tools`` plus every tool named in ``config.tool_modules``."""
        loaded = load_tool_registrations(config.tool_modules)
        return cls(config=config, tools=[*tools, *loaded], model_factory=model_factory)

    def register_tools(self, tools: Iterable[ToolLike]) -> None:
        """Add tools to the catalog; cached agents are dropped so they pick the tools up."""
        added = [
            tool
            for tool in to_callables(tools)
            if tool_id_enabled(tool.tool_id, self.config.enable_tools, self.config.disable_tools)
        ]
        if not added:
            return
        self._tools.extend(added)
        self.cache.clear()
        logger.info(f"Registered {len(added)} host tool(s): {', '.join(t.name for t in added)}")

    @property
    def tools(self) -> list[BridgedTool]:
        """The host tool catalog after config-level enable/disable filtering."""
        return list(self._tools)

    def agents(self) -> list[AgentSpec]:
        return configured_agents(self.config)

    def get_agent_spec(self, agent_id: str) -> AgentSpec:
        """
        Look up a configured agent by id or tool name.

        Raises:
            ConfigurationError: No such agent.
        """
        wanted = normalize_id(agent_id)
        for spec in self.agents():
            if wanted in (spec.id, spec.tool_name):
                return spec
        raise ConfigurationError(f"Unknown agent: {agent_id}")

    def get_agent(self, spec: AgentSpec) -> GeneralAgent:
        """Cached agent for ``spec``, built on first use."""
        return self.cache.get_or_create(
            spec.id,
            lambda: build_agent_from_spec(spec, self._tools, self.config, self._model_factory),
        )

    def chat(self, agent: AgentSpec | str, prompt: str) -> ChatResult:
        """
        Chat with a configured agent.

        Raises:
            ConfigurationError: The agent is unknown or cannot be built.
        """
        spec = agent if isinstance(agent, AgentSpec) else self.get_agent_spec(agent)
        instance = self.get_agent(spec)
        instance.update_context(build_context_strings(self.config.working_path, spec.context))
        return instance.chat(prompt)

    def agent_tools(self) -> list[ToolRegistration]:
        """One tool per configured agent, taking a single ``prompt`` argument."""
        registrations = [self._agent_tool(spec) for spec in self.agents()]
        logger.debug(f"Created {len(registrations)} agent tools")
        return registrations

    def _agent_tool(self, spec: AgentSpec) -> ToolRegistration:
        def handler(context: Any, args: dict[str, Any], callback: ToolCallback) -> None:
            prompt = args.get("prompt")
            if prompt is None:
                callback(["The 'prompt' parameter is required"], True)
                return
            if not isinstance(prompt, str):
                callback([f"Parameter 'prompt' must be a string, got {type(prompt).__name__}"], True)
                return
            result = self.chat(spec, prompt)
            callback([result.result], result.error)

        return ToolRegistration(
            name=spec.tool_name,
            description=spec.description,
            schema=AGENT_TOOL_SCHEMA,
            handler=handler,
        )
