"""Error taxonomy for the agent runtime."""

from __future__ import annotations


class AgentryError(RuntimeError):
    """Base error for agent runtime failures."""


class ConfigurationError(AgentryError):
    """Raised when a model, tool or agent cannot be constructed from its configuration."""


class SchemaError(ConfigurationError):
    """Raised when a tool parameter schema falls outside the supported subset."""


class ToolArgumentError(AgentryError):
    """Raised when tool-call arguments cannot be parsed."""


class ToolExecutionError(AgentryError):
    """Raised when a tool handler reports an error or throws."""


class EmptyInputError(AgentryError):
    """Raised when a chat prompt is empty or blank."""


class AuthenticationError(AgentryError):
    """Raised when a provider rejects the configured credentials."""


class UnreachableProviderError(AgentryError):
    """Raised when a provider cannot be reached or times out."""


class ToolLoadError(AgentryError):
    """Raised when a tool plugin entry cannot be imported."""
