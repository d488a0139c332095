"""Enable/disable filtering of tool sets by tool id."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from agentry.utils.helpers import normalize_id

ALL_TOOLS = "all"

T = TypeVar("T")


def normalize_tool_id(value: Any) -> str:
    """``"bash"``, ``":bash"`` and an enum member valued ``"bash"`` are the same id."""
    return normalize_id(value)


def tool_id_of(tool: Any) -> str:
    """Tool id: the declared ``tool_id``/``tool_type`` when present, otherwise the name."""
    declared = getattr(tool, "tool_id", None) or getattr(tool, "tool_type", None)
    return normalize_tool_id(declared or tool.name)


def enables_all(enable: Any) -> bool:
    """True for ``"all"``, ``":all"`` or a list containing either."""
    if enable is None:
        return False
    if isinstance(enable, str) or not isinstance(enable, Iterable):
        return normalize_tool_id(enable) == ALL_TOOLS
    return any(normalize_tool_id(item) == ALL_TOOLS for item in enable)


def _id_set(ids: Any) -> set[str]:
    if not ids:
        return set()
    if isinstance(ids, str) or not isinstance(ids, Iterable):
        return {normalize_tool_id(ids)}
    return {normalize_tool_id(item) for item in ids}


def filter_tools(all_tools: Sequence[T], enable: Any, disable: Any = None) -> list[T]:
    """
    Select tools for an agent.

    Args:
        all_tools: Candidate tools, each with a ``name`` and optionally a ``tool_type``.
        enable: ``None`` for no tools, ``"all"`` for every tool, or a list of ids.
        disable: Ids removed from the selection; disable always wins.

    Returns:
        The selected tools in their original order.
    """
    if enable is None:
        return []
    disabled = _id_set(disable)
    if enables_all(enable):
        return [tool for tool in all_tools if tool_id_of(tool) not in disabled]
    enabled = _id_set(enable) - disabled
    return [tool for tool in all_tools if tool_id_of(tool) in enabled]


def tool_id_enabled(tool_id: Any, enable: Any = None, disable: Any = None) -> bool:
    """
    Host-level check for a single tool id.

    Unlike ``filter_tools``, an absent enable list means every tool is
    enabled; an empty list enables nothing.
    """
    tid = normalize_tool_id(tool_id)
    if tid in _id_set(disable):
        return False
    if enable is None or enables_all(enable):
        return True
    return tid in _id_set(enable)
