"""Tests for building agents from agent specs."""

from pathlib import Path

import pytest

from agentry.agent.tools.bridge import ToolRegistration, to_callables
from agentry.config.schema import AgentSpec, Config
from agentry.control.agent_builder import build_agent_from_spec, configured_agents, default_model_key
from agentry.control.default_agents import READ_ONLY_TOOLS, merge_tool_config_into_agent
from agentry.errors import ConfigurationError
from agentry.providers.base import LLMProvider, LLMResponse


class FakeProvider(LLMProvider):
    def __init__(self, model_key: str):
        super().__init__()
        self.model_key = model_key

    def chat(self, messages, tools=None):
        return LLMResponse(content=f"{self.model_key} says hi")

    def get_default_model(self) -> str:
        return self.model_key


@pytest.fixture(autouse=True)
def _no_provider_keys(monkeypatch):
    for var in ("ANTHROPIC_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def _tools(*names):
    def handler(_context, _args, callback):
        callback("ok", False)

    return to_callables(
        ToolRegistration(name=name, description=name, schema={"type": "object"}, handler=handler) for name in names
    )


def _by_id(specs):
    return {spec.id: spec for spec in specs}


def test_default_agents_are_configured():
    specs = _by_id(configured_agents(Config()))
    assert set(specs) == {"dispatch_agent", "architect", "code_critique"}
    assert specs["dispatch_agent"].context is True
    assert specs["dispatch_agent"].enable_tools == READ_ONLY_TOOLS
    assert specs["code_critique"].enable_tools is None
    assert specs["code_critique"].memory_size == 35


def test_user_agent_replaces_default():
    config = Config(agents=[{"id": ":architect", "system_message": "custom architect", "enable_tools": "all"}])
    specs = _by_id(configured_agents(config))

    assert specs["architect"].system_message == "custom architect"
    assert specs["architect"].enable_tools == "all"
    assert len(specs) == 3


def test_user_agents_are_added():
    config = Config(agents=[{"id": "reviewer", "name": "reviewer_tool", "system_message": "review"}])
    specs = _by_id(configured_agents(config))
    assert specs["reviewer"].tool_name == "reviewer_tool"
    assert len(specs) == 4


def test_tools_config_overrides_only_known_keys():
    config = Config(tools_config={"architect": {"model": "openai/gpt-4o", "memory_size": 60, "bogus": 1}})
    spec = _by_id(configured_agents(config))["architect"]

    assert spec.model == "openai/gpt-4o"
    assert spec.memory_size == 60
    assert spec.system_message.startswith("You are an expert software architect")


def test_merge_tool_config_without_overrides_is_identity():
    spec = AgentSpec(id="a", system_message="s")
    assert merge_tool_config_into_agent(spec, None) is spec
    assert merge_tool_config_into_agent(spec, {"unrelated": True}) is spec


def test_default_model_key_follows_provider_preference(monkeypatch):
    config = Config()
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    assert default_model_key(config) == "openai/o4-mini"

    monkeypatch.setenv("GEMINI_API_KEY", "gm-key")
    assert default_model_key(config) == "google/gemini-2-5-flash"

    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
    assert default_model_key(config) == "anthropic/claude-sonnet-4"


def test_default_model_key_without_keys():
    with pytest.raises(ConfigurationError, match="No model configured"):
        default_model_key(Config())


def test_build_agent_filters_tools_and_uses_factory(tmp_path: Path):
    config = Config(working_directory=str(tmp_path))
    spec = AgentSpec(
        id="reader",
        system_message="read things",
        model="openai/gpt-4o",
        enable_tools=["read_file", "grep"],
        disable_tools=["grep"],
    )

    agent = build_agent_from_spec(spec, _tools("read_file", "grep", "bash"), config, model_factory=FakeProvider)

    assert agent.tools.tool_names == ["read_file"]
    assert agent.model.get_default_model() == "openai/gpt-4o"
    assert agent.system_prompt == "read things"
    assert agent.stateless
    assert agent.chat("hi").result == "openai/gpt-4o says hi"


def test_build_agent_uses_project_context(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
    (tmp_path / "PROJECT_SUMMARY.md").write_text("A small project")
    config = Config(working_directory=str(tmp_path))
    spec = _by_id(configured_agents(config))["dispatch_agent"]

    agent = build_agent_from_spec(spec, _tools("read_file", "bash"), config, model_factory=FakeProvider)

    assert agent.context == ["This is a project summary:\nA small project"]
    assert agent.model.get_default_model() == "anthropic/claude-sonnet-4"
    assert agent.tools.tool_names == ["read_file"]
    assert agent.memory_size == 100
    assert len(agent.memory) == 1


def test_build_agent_round_trip_cap_comes_from_config(tmp_path: Path):
    config = Config(working_directory=str(tmp_path), defaults={"max_round_trips": 5})
    spec = AgentSpec(id="a", system_message="s", model="openai/gpt-4o")
    agent = build_agent_from_spec(spec, [], config, model_factory=FakeProvider)
    assert agent.max_round_trips == 5
