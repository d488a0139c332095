"""Tests for ToolRegistry."""

from agentry.agent.tools.bridge import ToolRegistration, to_callable
from agentry.agent.tools.registry import ToolRegistry


def _registration(name, reply="ok"):
    def handler(_context, _args, callback):
        callback(reply, False)

    return ToolRegistration(name=name, description=f"{name} tool", schema={"type": "object"}, handler=handler)


def test_register_and_execute():
    registry = ToolRegistry()
    registry.register(_registration("alpha", "from alpha"))

    assert "alpha" in registry
    assert len(registry) == 1
    assert registry.tool_names == ["alpha"]
    assert registry.execute("alpha", "{}") == "from alpha"


def test_unknown_tool():
    assert ToolRegistry().execute("ghost", "{}") == "ERROR: Unknown tool 'ghost'"


def test_definitions_follow_registration_order():
    registry = ToolRegistry([_registration("a"), _registration("b")])
    assert [d["function"]["name"] for d in registry.get_definitions()] == ["a", "b"]


def test_latest_registration_wins():
    registry = ToolRegistry()
    registry.register(_registration("a", "old"))
    registry.register(_registration("a", "new"))
    assert len(registry) == 1
    assert registry.execute("a", "{}") == "new"


def test_bridged_tools_are_kept_as_is():
    bridged = to_callable(_registration("a"))
    registry = ToolRegistry([bridged])
    assert registry.get("a") is bridged
    assert list(registry) == [bridged]


def test_unregister():
    registry = ToolRegistry([_registration("a")])
    registry.unregister("a")
    registry.unregister("never-there")
    assert len(registry) == 0
    assert registry.get("a") is None
