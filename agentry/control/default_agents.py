"""Built-in agent configurations, available unless a user agent overrides them."""

from __future__ import annotations

from typing import Any

from agentry.config.schema import AgentSpec

READ_ONLY_TOOLS = ["LS", "read_file", "grep", "glob_files", "think", "inspect_project"]

# Only these keys may be overridden from tools_config.
MERGEABLE_KEYS = (
    "name",
    "context",
    "model",
    "system_message",
    "enable_tools",
    "disable_tools",
    "description",
    "memory_size",
)

_DISPATCH_DESCRIPTION = (
    "Launch an agent that can search and read the project with read-only tools. "
    "Use it for open-ended searches where you are not confident you will find the "
    "right match in the first few tries. The agent cannot modify files."
)

_DISPATCH_SYSTEM = (
    "You are a search and exploration agent working inside a software project. "
    "Use the available read-only tools to find the files, definitions and usages "
    "relevant to the request. Answer concisely, cite file paths, and say so when "
    "you could not find something."
)

_ARCHITECT_DESCRIPTION = (
    "Your go-to tool for any technical or coding task. Analyzes requirements and "
    "breaks them down into clear, actionable implementation steps."
)

_ARCHITECT_SYSTEM = (
    "You are an expert software architect. Given a technical request, analyze the "
    "requirements and produce a concise, step-by-step implementation plan. Read the "
    "relevant code before planning. Do not write the implementation; describe what "
    "should change and where."
)

_CRITIQUE_DESCRIPTION = (
    "Starts an interactive code review conversation that provides constructive "
    "feedback on the submitted code."
)

_CRITIQUE_SYSTEM = (
    "You are a careful code reviewer. Critique the submitted code for correctness, "
    "clarity and idiomatic style. Give at most a handful of specific, actionable "
    "suggestions, most important first."
)


def dispatch_agent_spec() -> AgentSpec:
    """General-purpose exploration agent with read-only tools and project context."""
    return AgentSpec(
        id="dispatch_agent",
        name="dispatch_agent",
        description=_DISPATCH_DESCRIPTION,
        system_message=_DISPATCH_SYSTEM,
        context=True,
        enable_tools=READ_ONLY_TOOLS,
        memory_size=100,
    )


def architect_spec() -> AgentSpec:
    return AgentSpec(
        id="architect",
        name="architect",
        description=_ARCHITECT_DESCRIPTION,
        system_message=_ARCHITECT_SYSTEM,
        context=False,
        enable_tools=READ_ONLY_TOOLS,
        memory_size=100,
    )


def code_critique_spec() -> AgentSpec:
    return AgentSpec(
        id="code_critique",
        name="code_critique",
        description=_CRITIQUE_DESCRIPTION,
        system_message=_CRITIQUE_SYSTEM,
        context=False,
        enable_tools=None,
        memory_size=35,
    )


def make_default_agents() -> list[AgentSpec]:
    return [dispatch_agent_spec(), architect_spec(), code_critique_spec()]


def default_agent_ids() -> set[str]:
    return {spec.id for spec in make_default_agents()}


def merge_tool_config_into_agent(spec: AgentSpec, tool_config: dict[str, Any] | None) -> AgentSpec:
    """Overlay the agent-relevant keys of a ``tools_config`` entry onto ``spec``."""
    if not tool_config:
        return spec
    updates = {key: tool_config[key] for key in MERGEABLE_KEYS if key in tool_config}
    if not updates:
        return spec
    return AgentSpec.model_validate({**spec.model_dump(), **updates})
