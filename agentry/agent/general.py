"""General-purpose agent: a system prompt, a model, tools and memory."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from agentry.agent.memory import MemoryTurn, create_memory, reset_if_near_capacity, seed_memory
from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import BridgedTool, ToolRegistration, to_callables
from agentry.agent.tools.registry import ToolRegistry
from agentry.errors import ConfigurationError, EmptyInputError
from agentry.providers.base import LLMProvider, LLMResponse
from agentry.utils.helpers import format_error

DEFAULT_MAX_ROUND_TRIPS = 25

ToolLike = ToolRegistration | Tool | BridgedTool


@dataclass
class ChatResult:
    """Outcome of one chat call."""

    result: str
    error: bool = False
    thinking: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"result": self.result, "error": self.error}
        if self.thinking is not None:
            data["thinking"] = self.thinking
        return data


class GeneralAgent:
    """
    An agent parameterized by system prompt, context, tools, memory and model.

    Memory is stateless (cleared and reseeded with the context on every chat)
    or persistent (a sliding window reset when it nears capacity), depending
    on ``memory_size``. One agent must not be chatted from several threads at
    once; distinct agents are independent.
    """

    def __init__(
        self,
        model: LLMProvider,
        system_prompt: str,
        tools: Iterable[ToolLike] | None = None,
        context: Sequence[str] | None = None,
        memory_size: Any = None,
        max_round_trips: int = DEFAULT_MAX_ROUND_TRIPS,
        name: str = "agent",
        call_context: Any = None,
    ) -> None:
        if model is None:
            raise ConfigurationError("Model is required")
        if not system_prompt:
            raise ConfigurationError("System prompt is required")
        if max_round_trips < 1:
            raise ConfigurationError(f"max_round_trips must be at least 1, got {max_round_trips}")

        self.name = name
        self.model = model
        self.system_prompt = system_prompt
        self.tools = ToolRegistry(to_callables(tools or ()))
        self.context: list[str] = list(context or [])
        self.memory_size_config = memory_size
        self.memory, self._policy = create_memory(memory_size)
        self.max_round_trips = max_round_trips
        self.call_context = call_context

        if not self.stateless:
            seed_memory(self.memory, self.context)

        logger.info(
            f"Agent {name} ready: model={model.get_default_model()}, tools={len(self.tools)}, "
            f"memory={'stateless' if self.stateless else self.memory_size}"
        )

    @property
    def stateless(self) -> bool:
        return self._policy.stateless

    @property
    def memory_size(self) -> int:
        """Effective memory capacity in turns."""
        return self._policy.capacity

    def chat(self, prompt: str) -> ChatResult:
        """
        Send a prompt and block until the model produces a final answer.

        Tool calls requested by the model are run through the tool bridge and
        fed back until a reply carries no tool calls. Failures come back as
        an error ``ChatResult``; nothing is raised.
        """
        try:
            _require_prompt(prompt)
        except EmptyInputError as e:
            return ChatResult(result=f"Error: {e}", error=True)

        try:
            self._prepare_memory()
            return self._run(prompt)
        except Exception as e:
            logger.error(f"Agent {self.name} chat failed: {format_error(e)}")
            return ChatResult(result=f"Error: {e}", error=True)

    def update_context(self, new_context: Sequence[str] | None) -> bool:
        """
        Replace the context, clearing and reseeding memory if it changed.

        Returns:
            True when the context differed and memory was reseeded.
        """
        context = list(new_context or [])
        if context == self.context:
            return False
        self.context = context
        self.memory.clear()
        seed_memory(self.memory, context)
        logger.debug(f"Agent {self.name} context updated ({len(context)} entries)")
        return True

    def add_tools(self, new_tools: Iterable[ToolLike]) -> GeneralAgent:
        """Return a new agent with ``new_tools`` appended; prompt, context and memory carry over."""
        agent = GeneralAgent(
            model=self.model,
            system_prompt=self.system_prompt,
            tools=[*self.tools, *to_callables(new_tools)],
            context=self.context,
            memory_size=self.memory_size_config,
            max_round_trips=self.max_round_trips,
            name=self.name,
            call_context=self.call_context,
        )
        agent.memory = self.memory.copy()
        return agent

    def _prepare_memory(self) -> None:
        if self.stateless:
            self.memory.clear()
            seed_memory(self.memory, self.context)
        else:
            reset_if_near_capacity(self.memory, self.context, self.memory_size)

    def _run(self, prompt: str) -> ChatResult:
        self.memory.add(MemoryTurn(role="user", parts=[prompt]))
        definitions = self.tools.get_definitions() or None

        for _ in range(self.max_round_trips):
            messages = [{"role": "system", "content": self.system_prompt}, *self.memory.messages()]
            response = self.model.chat(messages, tools=definitions)

            if not response.has_tool_calls:
                text = response.content or ""
                self.memory.add(
                    MemoryTurn(role="assistant", parts=[text], thinking_blocks=response.thinking_blocks or None)
                )
                return ChatResult(result=text, thinking=response.thinking)

            self.memory.add(_assistant_turn(response))
            for tool_call in response.tool_calls:
                output = self.tools.execute(tool_call.name, tool_call.arguments, self.call_context)
                self.memory.add(
                    MemoryTurn(
                        role="tool",
                        parts=[output],
                        tool_call_id=tool_call.id,
                        name=tool_call.name,
                    )
                )

        logger.warning(f"Agent {self.name} hit the round-trip cap ({self.max_round_trips})")
        return ChatResult(
            result=f"Error: Reached maximum of {self.max_round_trips} model round trips without a final answer",
            error=True,
        )


def _require_prompt(prompt: Any) -> None:
    if not isinstance(prompt, str) or not prompt.strip():
        raise EmptyInputError("Cannot process empty prompt")


def _assistant_turn(response: LLMResponse) -> MemoryTurn:
    return MemoryTurn(
        role="assistant",
        parts=[response.content] if response.content else [],
        tool_calls=[
            {
                "id": tc.id,
                "type": "function",
                "function": {"name": tc.name, "arguments": tc.arguments},
            }
            for tc in response.tool_calls
        ],
        thinking_blocks=response.thinking_blocks or None,
    )
