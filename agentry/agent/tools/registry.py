"""Registry of bridged tools, keyed by name."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from loguru import logger

from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import BridgedTool, ToolRegistration, to_callable


class ToolRegistry:
    """In-memory tool registry used by the chat loop."""

    def __init__(self, tools: Iterable[ToolRegistration | Tool | BridgedTool] = ()) -> None:
        self._tools: dict[str, BridgedTool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolRegistration | Tool | BridgedTool) -> BridgedTool:
        """Bridge (if needed) and register a tool; a later tool with the same name replaces the earlier."""
        bridged = tool if isinstance(tool, BridgedTool) else to_callable(tool)
        if bridged.name in self._tools:
            logger.warning(f"Tool {bridged.name} registered twice; keeping the latest")
        self._tools[bridged.name] = bridged
        return bridged

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> BridgedTool | None:
        return self._tools.get(name)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_definitions(self) -> list[dict[str, Any]]:
        return [tool.spec for tool in self._tools.values()]

    def execute(self, name: str, raw_args: str, call_context: Any = None) -> str:
        """Run a tool by name; never raises."""
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return f"ERROR: Unknown tool '{name}'"
        return tool.execute(raw_args, call_context)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BridgedTool]:
        return iter(list(self._tools.values()))
