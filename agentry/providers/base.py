"""Base types shared by LLM provider implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCallRequest:
    """A tool invocation requested by the model.

    ``arguments`` keeps the raw argument string exactly as the model produced
    it; parsing happens in the tool bridge.
    """

    id: str
    name: str
    arguments: str


@dataclass
class LLMResponse:
    """Normalized model response."""

    content: str | None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)
    # Provider reasoning blocks, replayed verbatim on the next request.
    thinking_blocks: list[dict[str, Any]] = field(default_factory=list)
    thinking: str | None = None

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


class LLMProvider(ABC):
    """
    Abstract model handle.

    A handle is fully configured at construction and ready to call; agents
    only depend on ``chat``.
    """

    def __init__(self, api_key: str | None = None, api_base: str | None = None) -> None:
        self.api_key = api_key
        self.api_base = api_base

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: OpenAI-style message dicts, system message first.
            tools: Optional function-tool definitions.

        Returns:
            The normalized response.
        """

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the model identifier this handle talks to."""
