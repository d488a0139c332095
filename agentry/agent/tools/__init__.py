"""Agent tools module."""

from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import BridgedTool, ToolRegistration, registration_from_tool, to_callable
from agentry.agent.tools.registry import ToolRegistry

__all__ = ["Tool", "ToolRegistry", "ToolRegistration", "BridgedTool", "to_callable", "registration_from_tool"]
