"""Base class for host tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

_TYPE_CHECKS: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list, tuple),
    "object": (dict,),
}


class Tool(ABC):
    """
    Abstract base class for host tools.

    A tool declares a name, a description and a JSON-schema ``parameters``
    object, and implements ``execute``. Tools are exposed to agents through
    ``agentry.agent.tools.bridge.registration_from_tool``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name used in function calls."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of what the tool does."""

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""

    @property
    def tool_type(self) -> str | None:
        """Declared type tag used as the tool id for filtering; defaults to the name."""
        return None

    @abstractmethod
    async def execute(self, **kwargs: Any) -> Any:
        """
        Execute the tool with given parameters.

        Returns:
            A string, a list of strings, or any value that stringifies sensibly.
        """

    def validate_params(self, params: dict[str, Any]) -> list[str]:
        """
        Validate parameters against the tool's schema.

        Returns:
            A list of human-readable errors; empty when the parameters are valid.
        """
        schema = self.parameters or {}
        if schema.get("type", "object") != "object":
            raise ValueError(f"Schema must be object type, got {schema.get('type')!r}")
        return _validate(params, {**schema, "type": "object"}, "")


def _validate(value: Any, schema: dict[str, Any], path: str) -> list[str]:
    expected = schema.get("type")
    label = path or "parameter"

    if expected in _TYPE_CHECKS:
        # bool is an int subclass
        if expected in ("integer", "number") and isinstance(value, bool):
            return [f"{label} should be {expected}"]
        if not isinstance(value, _TYPE_CHECKS[expected]):
            return [f"{label} should be {expected}"]

    errors: list[str] = []
    if "enum" in schema and value not in schema["enum"]:
        errors.append(f"{label} must be one of {schema['enum']}")

    if expected in ("integer", "number"):
        if "minimum" in schema and value < schema["minimum"]:
            errors.append(f"{label} must be >= {schema['minimum']}")
        if "maximum" in schema and value > schema["maximum"]:
            errors.append(f"{label} must be <= {schema['maximum']}")

    if expected == "string":
        if "minLength" in schema and len(value) < schema["minLength"]:
            errors.append(f"{label} must be at least {schema['minLength']} chars")
        if "maxLength" in schema and len(value) > schema["maxLength"]:
            errors.append(f"{label} must be at most {schema['maxLength']} chars")

    if expected == "object":
        properties = schema.get("properties", {})
        for key in schema.get("required", []):
            if key not in value:
                errors.append(f"missing required {_join(path, key)}")
        for key, item in value.items():
            if key in properties:
                errors.extend(_validate(item, properties[key], _join(path, key)))

    if expected == "array" and "items" in schema:
        for i, item in enumerate(value):
            errors.extend(_validate(item, schema["items"], f"{label}[{i}]"))

    return errors


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key
