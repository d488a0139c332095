"""Size-bounded conversational memory."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from agentry.errors import ConfigurationError

DEFAULT_STATELESS_BUFFER = 100
MIN_PERSISTENT_WINDOW = 10
# Persistent memory is reset once it grows past capacity minus this margin.
RESET_MARGIN = 50


@dataclass
class MemoryTurn:
    """One conversational turn."""

    role: str
    parts: list[str] = field(default_factory=list)
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None
    name: str | None = None
    thinking_blocks: list[dict[str, Any]] | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.parts)

    def to_message(self) -> dict[str, Any]:
        """Render as an OpenAI-style message dict."""
        if self.role == "tool":
            return {
                "role": "tool",
                "tool_call_id": self.tool_call_id,
                "name": self.name,
                "content": self.text,
            }
        if self.role == "assistant":
            message: dict[str, Any] = {"role": "assistant", "content": self.text or None}
            if self.tool_calls:
                message["tool_calls"] = self.tool_calls
            if self.thinking_blocks:
                message["thinking_blocks"] = self.thinking_blocks
            return message
        if len(self.parts) == 1:
            return {"role": self.role, "content": self.parts[0]}
        return {"role": self.role, "content": [{"type": "text", "text": part} for part in self.parts]}


class ConversationMemory:
    """
    Ordered turns with a sliding window of ``capacity`` turns.

    When the window slides, leading tool-result turns whose assistant turn
    was evicted are dropped too. The window never slides past the latest
    user turn, so a long tool exchange may hold more than ``capacity`` turns
    until the next prompt arrives.
    """

    def __init__(self, capacity: int = DEFAULT_STATELESS_BUFFER) -> None:
        if capacity < 1:
            raise ConfigurationError(f"Memory capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._turns: list[MemoryTurn] = []

    def add(self, turn: MemoryTurn) -> None:
        self._turns.append(turn)
        if len(self._turns) <= self.capacity:
            return
        cut = len(self._turns) - self.capacity
        latest_user = max((i for i, t in enumerate(self._turns) if t.role == "user"), default=None)
        if latest_user is not None and cut > latest_user:
            logger.debug(
                f"Exchange holds {len(self._turns) - latest_user} turns; keeping it past capacity {self.capacity}"
            )
            cut = latest_user
        del self._turns[:cut]
        while self._turns and self._turns[0].role == "tool":
            self._turns.pop(0)

    def clear(self) -> None:
        self._turns.clear()

    def copy(self) -> ConversationMemory:
        """Independent memory with the same capacity and turns."""
        clone = ConversationMemory(self.capacity)
        clone._turns = list(self._turns)
        return clone

    @property
    def turns(self) -> list[MemoryTurn]:
        return list(self._turns)

    def messages(self) -> list[dict[str, Any]]:
        return [turn.to_message() for turn in self._turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[MemoryTurn]:
        return iter(list(self._turns))


@dataclass(frozen=True)
class MemoryPolicy:
    """How an agent's memory behaves between chats."""

    stateless: bool
    capacity: int


def memory_policy(memory_size: Any) -> MemoryPolicy:
    """
    Resolve a configured memory size.

    ``None``, ``False`` or a number below 10 give a stateless agent with a
    100-turn buffer; a number of 10 or more gives a persistent window of
    that size.

    Raises:
        ConfigurationError: Any other value.
    """
    if memory_size is None or memory_size is False:
        return MemoryPolicy(stateless=True, capacity=DEFAULT_STATELESS_BUFFER)
    if isinstance(memory_size, bool) or not isinstance(memory_size, int | float):
        raise ConfigurationError(f"Invalid memory_size value: {memory_size!r}")
    if memory_size < MIN_PERSISTENT_WINDOW:
        return MemoryPolicy(stateless=True, capacity=DEFAULT_STATELESS_BUFFER)
    return MemoryPolicy(stateless=False, capacity=int(memory_size))


def create_memory(memory_size: Any) -> tuple[ConversationMemory, MemoryPolicy]:
    policy = memory_policy(memory_size)
    return ConversationMemory(policy.capacity), policy


def seed_memory(memory: ConversationMemory, context: Sequence[str] | None) -> ConversationMemory:
    """Append one user turn holding every context string, in order; no-op for empty context."""
    if context:
        memory.add(MemoryTurn(role="user", parts=[str(part) for part in context]))
    return memory


def reset_if_near_capacity(
    memory: ConversationMemory,
    context: Sequence[str] | None,
    capacity: int,
) -> bool:
    """
    Clear and reseed ``memory`` once it holds more than ``capacity - RESET_MARGIN`` turns.

    Returns:
        True when the memory was reset.
    """
    if len(memory) <= capacity - RESET_MARGIN:
        return False
    logger.debug(f"Memory at {len(memory)} turns (capacity {capacity}); resetting with context")
    memory.clear()
    seed_memory(memory, context)
    return True
