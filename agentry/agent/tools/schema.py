"""Translation of host-neutral tool schemas into function-calling parameter schemas."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from agentry.errors import SchemaError
from agentry.utils.helpers import normalize_id

SCHEMA_TYPES = frozenset({"string", "integer", "number", "boolean", "array", "object", "null"})

# Copied through unchanged.
_CONSTRAINT_KEYS = frozenset(
    {
        "title",
        "format",
        "pattern",
        "minimum",
        "maximum",
        "minLength",
        "maxLength",
        "minItems",
        "maxItems",
        "additionalProperties",
    }
)


def load_schema(schema: Mapping[str, Any] | str) -> Mapping[str, Any]:
    """Accept a schema as a mapping or a JSON string."""
    if isinstance(schema, str):
        try:
            schema = json.loads(schema)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Tool schema is not valid JSON: {e}") from e
    if not isinstance(schema, Mapping):
        raise SchemaError(f"Tool schema must be an object, got {type(schema).__name__}")
    return schema


def to_parameters_schema(schema: Mapping[str, Any] | str) -> dict[str, Any]:
    """
    Convert a host-neutral tool schema into a JSON-schema ``parameters`` object.

    Keys, type names and enum values may be strings, ``":symbol"`` strings or
    enum members. The top level must describe an object.

    Raises:
        SchemaError: The schema uses a type or keyword outside the supported subset.
    """
    converted = _convert(load_schema(schema), "$")
    if "type" not in converted:
        converted["type"] = "object"
    if converted["type"] != "object":
        raise SchemaError(f"Tool schema must be of type object, got {converted['type']!r}")
    converted.setdefault("properties", {})
    return converted


def _value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _type_name(value: Any, path: str) -> str:
    name = normalize_id(value)
    if name not in SCHEMA_TYPES:
        raise SchemaError(f"Unsupported schema type {name!r} at {path}")
    return name


def _convert(node: Mapping[str, Any], path: str) -> dict[str, Any]:
    if not isinstance(node, Mapping):
        raise SchemaError(f"Schema node at {path} must be an object, got {type(node).__name__}")

    result: dict[str, Any] = {}
    for raw_key, value in node.items():
        key = normalize_id(raw_key)
        here = f"{path}.{key}"
        if key == "type":
            if isinstance(value, list | tuple):
                result["type"] = [_type_name(v, here) for v in value]
            else:
                result["type"] = _type_name(value, here)
        elif key == "description":
            result["description"] = str(value)
        elif key == "enum":
            if not isinstance(value, list | tuple) or not value:
                raise SchemaError(f"enum at {here} must be a non-empty list")
            result["enum"] = [_value(v) for v in value]
        elif key == "items":
            result["items"] = _convert(value, here)
        elif key == "properties":
            if not isinstance(value, Mapping):
                raise SchemaError(f"properties at {here} must be an object")
            result["properties"] = {
                normalize_id(name): _convert(prop, f"{here}.{normalize_id(name)}")
                for name, prop in value.items()
            }
        elif key == "required":
            if not isinstance(value, list | tuple):
                raise SchemaError(f"required at {here} must be a list")
            result["required"] = [normalize_id(name) for name in value]
        elif key == "default":
            result["default"] = _value(value)
        elif key in _CONSTRAINT_KEYS:
            result[key] = _value(value)
        else:
            raise SchemaError(f"Unsupported schema keyword {key!r} at {path}")
    return result


def tool_spec(name: str, description: str, schema: Mapping[str, Any] | str) -> dict[str, Any]:
    """Function-tool definition in the OpenAI/litellm wire format."""
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": to_parameters_schema(schema),
        },
    }
