"""Tests for loading host tools from module entries."""

from pathlib import Path

import pytest

from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import ToolRegistration
from agentry.control.tool_loader import load_tool_registrations
from agentry.errors import ToolLoadError

PLUGIN_SOURCE = '''
from agentry.agent.tools.base import Tool
from agentry.agent.tools.bridge import ToolRegistration


def _handler(context, args, callback):
    callback("ok", False)


SINGLE = ToolRegistration(name="single", description="d", schema={}, handler=_handler)
MANY = [
    ToolRegistration(name="first", description="d", schema={}, handler=_handler),
    ToolRegistration(name="second", description="d", schema={}, handler=_handler),
]
MIXED = [SINGLE, "not a tool"]
NOT_A_TOOL = 42


class PingTool(Tool):
    @property
    def name(self):
        return "ping"

    @property
    def description(self):
        return "Ping."

    @property
    def parameters(self):
        return {"type": "object", "properties": {}}

    async def execute(self, **kwargs):
        return "pong"


class NeedsArgs(PingTool):
    def __init__(self, host):
        self.host = host


def make_tools():
    return [SINGLE, PingTool()]


def broken_factory():
    raise RuntimeError("factory exploded")
'''


@pytest.fixture
def plugin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    (tmp_path / "loader_plugin_tools.py").write_text(PLUGIN_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return "loader_plugin_tools"


def test_single_registration(plugin: str) -> None:
    tools = load_tool_registrations([f"{plugin}:SINGLE"])
    assert len(tools) == 1
    assert isinstance(tools[0], ToolRegistration)
    assert tools[0].name == "single"


def test_list_and_class_entries(plugin: str) -> None:
    tools = load_tool_registrations([f"{plugin}:MANY", f"{plugin}:PingTool"])
    assert [t.name for t in tools] == ["first", "second", "ping"]
    assert isinstance(tools[2], Tool)


def test_factory_entry(plugin: str) -> None:
    assert [t.name for t in load_tool_registrations([f"{plugin}:make_tools"])] == ["single", "ping"]


def test_no_entries() -> None:
    assert load_tool_registrations([]) == []


@pytest.mark.parametrize(
    ("attr", "message"),
    [
        ("MISSING", "has no attribute 'MISSING'"),
        ("MIXED", "contains a non-tool item: str"),
        ("NOT_A_TOOL", "is not a tool"),
        ("NeedsArgs", "needs constructor arguments"),
        ("broken_factory", "factory exploded"),
    ],
)
def test_bad_entries(plugin: str, attr: str, message: str) -> None:
    with pytest.raises(ToolLoadError, match=message):
        load_tool_registrations([f"{plugin}:{attr}"])


@pytest.mark.parametrize("entry", ["no_colon", ":attr", "module:"])
def test_malformed_entries(entry: str) -> None:
    with pytest.raises(ToolLoadError, match="module:attribute"):
        load_tool_registrations([entry])


def test_unknown_module() -> None:
    with pytest.raises(ToolLoadError, match="Unable to import module"):
        load_tool_registrations(["agentry_no_such_module_here:tools"])
