"""Configuration schema using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentry.utils.helpers import normalize_id


def _default_models() -> dict[str, str]:
    return {
        "anthropic": "anthropic/claude-sonnet-4",
        "google": "google/gemini-2-5-flash",
        "openai": "openai/o4-mini",
    }


class Defaults(BaseModel):
    """Runtime-wide defaults."""

    models: dict[str, str] = Field(default_factory=_default_models)
    max_round_trips: int = Field(default=25, ge=1)


def _normalize_ids(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return normalize_id(value)
    return [normalize_id(item) for item in value]


class AgentSpec(BaseModel):
    """Declarative description of one configured agent."""

    id: str
    name: str | None = None
    description: str = ""
    system_message: str
    context: bool | list[str] | None = False
    model: str | None = None
    enable_tools: str | list[str] | None = None
    disable_tools: list[str] = Field(default_factory=list)
    memory_size: bool | int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> Any:
        return normalize_id(value)

    @field_validator("enable_tools", "disable_tools", mode="before")
    @classmethod
    def _normalize_tool_ids(cls, value: Any) -> Any:
        return _normalize_ids(value)

    @property
    def tool_name(self) -> str:
        """Name the agent is exposed under as a tool."""
        return self.name or self.id


class Config(BaseSettings):
    """Root configuration for agentry."""

    model_config = SettingsConfigDict(env_prefix="AGENTRY_", env_nested_delimiter="__")

    working_directory: str = "."
    defaults: Defaults = Field(default_factory=Defaults)
    models: dict[str, dict[str, Any]] = Field(default_factory=dict)
    agents: list[AgentSpec] = Field(default_factory=list)
    tools_config: dict[str, dict[str, Any]] = Field(default_factory=dict)
    enable_tools: str | list[str] | None = None
    disable_tools: list[str] = Field(default_factory=list)
    tool_modules: list[str] = Field(default_factory=list)

    @field_validator("enable_tools", "disable_tools", mode="before")
    @classmethod
    def _normalize_tool_ids(cls, value: Any) -> Any:
        return _normalize_ids(value)

    @property
    def working_path(self) -> Path:
        """Get expanded working directory."""
        return Path(self.working_directory).expanduser()

    def get_tool_config(self, *keys: str) -> dict[str, Any] | None:
        """First ``tools_config`` entry matching any of ``keys``."""
        for key in keys:
            found = self.tools_config.get(normalize_id(key))
            if found is not None:
                return found
        return None
