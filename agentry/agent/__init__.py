"""Agent core: memory, context and the chat loop."""

from agentry.agent.general import ChatResult, GeneralAgent
from agentry.agent.memory import ConversationMemory, MemoryTurn

__all__ = ["GeneralAgent", "ChatResult", "ConversationMemory", "MemoryTurn"]
