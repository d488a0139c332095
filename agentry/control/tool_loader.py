"""Loading host tools from ``module:attribute`` entries."""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from typing import Any

from loguru import logger

from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import ToolRegistration
from agentry.errors import ToolLoadError

LoadedTool = ToolRegistration | Tool


def load_tool_registrations(entries: Iterable[str]) -> list[LoadedTool]:
    """
    Import tools named by ``module:attribute`` entries.

    The attribute may be a ``ToolRegistration``, a ``Tool``, a ``Tool``
    subclass with a no-argument constructor, a list of these, or a
    zero-argument callable returning one of them.

    Raises:
        ToolLoadError: An entry cannot be imported or yields no tools.
    """
    tools: list[LoadedTool] = []
    for entry in entries:
        loaded = _coerce(_resolve(entry), entry)
        logger.info(f"Loaded {len(loaded)} tool(s) from {entry}")
        tools.extend(loaded)
    return tools


def _split_entry(entry: str) -> tuple[str, str]:
    module_path, sep, attr = entry.partition(":")
    if not sep or not module_path.strip() or not attr.strip():
        raise ToolLoadError(f"Tool entry must look like 'module:attribute': {entry!r}")
    return module_path.strip(), attr.strip()


def _resolve(entry: str) -> Any:
    module_path, attr = _split_entry(entry)
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ToolLoadError(f"Unable to import module '{module_path}': {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ToolLoadError(f"Module '{module_path}' has no attribute '{attr}'") from e


def _coerce(obj: Any, entry: str, depth: int = 0) -> list[LoadedTool]:
    if isinstance(obj, ToolRegistration | Tool):
        return [obj]
    if isinstance(obj, type) and issubclass(obj, Tool):
        try:
            return [obj()]
        except TypeError as e:
            raise ToolLoadError(f"Tool class {entry} needs constructor arguments: {e}") from e
    if isinstance(obj, list | tuple):
        items: list[LoadedTool] = []
        for item in obj:
            if not isinstance(item, ToolRegistration | Tool):
                raise ToolLoadError(f"{entry} contains a non-tool item: {type(item).__name__}")
            items.append(item)
        return items
    if callable(obj) and depth == 0:
        try:
            produced = obj()
        except Exception as e:
            raise ToolLoadError(f"Tool factory {entry} failed: {e}") from e
        return _coerce(produced, entry, depth + 1)
    raise ToolLoadError(f"{entry} is not a tool, a list of tools or a tool factory")
