"""Control module: agent cache, tool filtering and the host runtime."""

from agentry.control.cache import AgentCache
from agentry.control.runtime import AgentRuntime
from agentry.control.tool_filter import filter_tools, tool_id_enabled

__all__ = ["AgentCache", "AgentRuntime", "filter_tools", "tool_id_enabled"]
