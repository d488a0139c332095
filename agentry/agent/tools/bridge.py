"""Bridge between callback-style host tools and the model's synchronous tool calls."""

from __future__ import annotations

import asyncio
import json
import traceback
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from agentry.agent.tools.base import Tool
from agentry.agent.tools.schema import tool_spec
from agentry.errors import ConfigurationError, ToolArgumentError, ToolExecutionError
from agentry.utils.helpers import normalize_id, truncate_output

ToolCallback = Callable[..., None]
ToolHandler = Callable[[Any, dict[str, Any], ToolCallback], None]

MALFORMED_ARGUMENTS = "ERROR: Arguments provided to the tool call were malformed.\n=====\n{raw}\n=====\n"


@dataclass
class ToolRegistration:
    """
    A host tool as registered with the runtime.

    ``handler(context, args, callback)`` must eventually call
    ``callback(result, is_error)`` exactly once, from any thread.
    """

    name: str
    description: str
    schema: Mapping[str, Any] | str
    handler: ToolHandler
    tool_type: str | None = None

    @property
    def tool_id(self) -> str:
        """Id used for enable/disable filtering."""
        return normalize_id(self.tool_type or self.name)


@dataclass
class BridgedTool:
    """A tool ready for the chat loop: its wire spec plus a blocking executor."""

    name: str
    spec: dict[str, Any]
    executor: Callable[[str, Any], str]
    tool_id: str = ""
    registration: ToolRegistration | None = field(default=None, repr=False)

    def execute(self, raw_args: str, call_context: Any = None) -> str:
        return self.executor(raw_args, call_context)


def parse_arguments(raw_args: str) -> dict[str, Any]:
    """
    Parse raw tool-call arguments.

    Raises:
        ToolArgumentError: The input is not JSON or not a JSON object.
    """
    try:
        parsed = json.loads(raw_args)
    except (TypeError, json.JSONDecodeError) as e:
        raise ToolArgumentError(f"Malformed tool arguments: {e}") from e
    if not isinstance(parsed, dict):
        raise ToolArgumentError(f"Tool arguments must be a JSON object, got {type(parsed).__name__}")
    return parsed


def format_tool_result(result: Any, is_error: bool = False) -> str:
    """Render a handler's callback payload as the text the model sees."""
    if is_error:
        if result is None:
            messages: list[Any] = []
        elif isinstance(result, str):
            messages = [result]
        elif isinstance(result, list | tuple):
            messages = list(result)
        else:
            messages = [result]
        return "Tool Error: " + "\n".join(str(m) for m in messages)

    if result is None:
        return ""
    if isinstance(result, str):
        return result
    if isinstance(result, list | tuple):
        return "\n\n".join(str(item) for item in result)
    return str(result)


def _make_executor(registration: ToolRegistration) -> Callable[[str, Any], str]:
    name = registration.name
    handler = registration.handler

    def execute(raw_args: str, call_context: Any = None) -> str:
        try:
            args = parse_arguments(raw_args)
        except ToolArgumentError as e:
            logger.warning(f"Tool {name}: {e}")
            return MALFORMED_ARGUMENTS.format(raw=raw_args)

        logger.debug(f"Calling tool {name} with {truncate_output(json.dumps(args, default=str), 500)}")
        outcome: Future = Future()

        def callback(result: Any, is_error: bool = False) -> None:
            try:
                outcome.set_result((result, bool(is_error)))
            except InvalidStateError:
                logger.warning(f"Tool {name} called back more than once; ignoring later result")

        try:
            handler(call_context, args, callback)
        except Exception as e:
            if not outcome.done():
                logger.warning(f"Tool {name} raised {type(e).__name__}: {e}")
                return f"Error executing tool '{name}': {e}\n{traceback.format_exc()}"
            # The first callback result stands.
            logger.warning(f"Tool {name} raised {type(e).__name__} after calling back: {e}")

        result, is_error = outcome.result()
        text = format_tool_result(result, is_error)
        logger.debug(f"Tool {name} {'failed' if is_error else 'returned'}: {truncate_output(text, 500)}")
        return text

    return execute


def registration_from_tool(tool: Tool) -> ToolRegistration:
    """
    Adapt a class-based ``Tool`` to the callback registration contract.

    Arguments are validated against the tool's schema first; violations are
    reported as a tool error without running the tool.
    """

    def handler(context: Any, args: dict[str, Any], callback: ToolCallback) -> None:
        errors = tool.validate_params(args)
        if errors:
            callback(errors, True)
            return
        try:
            result = asyncio.run(tool.execute(**args))
        except Exception as e:
            raise ToolExecutionError(f"{tool.name} failed: {e}") from e
        callback(result, False)

    return ToolRegistration(
        name=tool.name,
        description=tool.description,
        schema=tool.parameters,
        handler=handler,
        tool_type=tool.tool_type,
    )


def to_callable(registration: ToolRegistration | Tool) -> BridgedTool:
    """
    Bridge a registration into a tool the chat loop can call synchronously.

    Raises:
        ConfigurationError: The registration is incomplete or its schema is unsupported.
    """
    if isinstance(registration, Tool):
        registration = registration_from_tool(registration)
    if not isinstance(registration.name, str) or not registration.name:
        raise ConfigurationError("Tool registration needs a non-empty name")
    if not isinstance(registration.description, str):
        raise ConfigurationError(f"Tool {registration.name} needs a string description")
    if not callable(registration.handler):
        raise ConfigurationError(f"Tool {registration.name} handler is not callable")

    return BridgedTool(
        name=registration.name,
        spec=tool_spec(registration.name, registration.description, registration.schema),
        executor=_make_executor(registration),
        tool_id=registration.tool_id,
        registration=registration,
    )


def to_callables(registrations: Iterable[ToolRegistration | Tool | BridgedTool]) -> list[BridgedTool]:
    """Bridge several registrations, passing already-bridged tools through."""
    return [r if isinstance(r, BridgedTool) else to_callable(r) for r in registrations]
