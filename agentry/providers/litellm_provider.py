"""LiteLLM-based model handle implementation."""

import json
from typing import Any

from loguru import logger

from agentry.errors import AuthenticationError, UnreachableProviderError
from agentry.providers.base import LLMProvider, LLMResponse, ToolCallRequest

_CACHE_CONTROL = {"type": "ephemeral"}


class LiteLLMProvider(LLMProvider):
    """
    Model handle using LiteLLM as a unified gateway.

    The builder resolves every request parameter up front; ``params`` is
    passed to ``litellm.completion`` unchanged on each call.
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        api_base: str | None = None,
        params: dict[str, Any] | None = None,
        log_requests: bool = False,
        log_responses: bool = False,
        cache_system_messages: bool = False,
        cache_tools: bool = False,
        send_thinking: bool = False,
        return_thinking: bool = False,
    ):
        super().__init__(api_key, api_base)
        self._default_model = model
        self.params: dict[str, Any] = dict(params or {})
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.cache_system_messages = cache_system_messages
        self.cache_tools = cache_tools
        self.send_thinking = send_thinking
        self.return_thinking = return_thinking

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """Send a chat completion request via LiteLLM."""
        try:
            import litellm
        except ImportError:
            raise RuntimeError("litellm is required. Install with: pip install litellm")

        kwargs: dict[str, Any] = {
            "model": self._default_model,
            "messages": self._prepare_messages(messages),
            **self.params,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if tools:
            kwargs["tools"] = self._prepare_tools(tools)

        logger.debug(f"LLM request: model={self._default_model}, messages={len(messages)}")
        if self.log_requests:
            logger.debug(f"LLM request payload: {json.dumps(_redacted(kwargs), default=str)}")

        try:
            response = litellm.completion(**kwargs)
        except litellm.AuthenticationError as e:
            raise AuthenticationError(f"Authentication failed for {self._default_model}: {e}") from e
        except (litellm.APIConnectionError, litellm.Timeout, litellm.ServiceUnavailableError) as e:
            raise UnreachableProviderError(f"Could not reach {self._default_model}: {e}") from e

        parsed = self._parse_response(response)
        if self.log_responses:
            logger.debug(
                f"LLM response: finish_reason={parsed.finish_reason}, "
                f"tool_calls={[tc.name for tc in parsed.tool_calls]}, content={parsed.content!r}"
            )
        return parsed

    def get_default_model(self) -> str:
        """Get the model identifier this handle talks to."""
        return self._default_model

    def _prepare_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not self.cache_system_messages and self.send_thinking:
            return messages
        prepared: list[dict[str, Any]] = []
        for message in messages:
            if not self.send_thinking and "thinking_blocks" in message:
                message = {k: v for k, v in message.items() if k != "thinking_blocks"}
            is_system = message.get("role") == "system" and isinstance(message.get("content"), str)
            if self.cache_system_messages and is_system:
                message = {
                    "role": "system",
                    "content": [
                        {"type": "text", "text": message["content"], "cache_control": _CACHE_CONTROL}
                    ],
                }
            prepared.append(message)
        return prepared

    def _prepare_tools(self, tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not self.cache_tools:
            return tools
        # Marking the last definition caches the whole tool block.
        prepared = [dict(tool) for tool in tools]
        prepared[-1]["cache_control"] = _CACHE_CONTROL
        return prepared

    def _parse_response(self, response: Any) -> LLMResponse:
        choice = response.choices[0]
        message = choice.message

        content = message.content
        # Some providers return segmented content payloads.
        if isinstance(content, list):
            text_parts = [
                str(part.get("text", ""))
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            ]
            content = "\n".join(part for part in text_parts if part)

        tool_calls: list[ToolCallRequest] = []
        if message.tool_calls:
            for tc in message.tool_calls:
                arguments = tc.function.arguments
                if arguments is None:
                    arguments = "{}"
                elif not isinstance(arguments, str):
                    arguments = json.dumps(arguments)

                tool_calls.append(
                    ToolCallRequest(
                        id=tc.id,
                        name=tc.function.name,
                        arguments=arguments,
                    )
                )

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        thinking_blocks = _thinking_blocks(message)
        thinking = None
        if self.return_thinking:
            thinking = _thinking_text(message, thinking_blocks)

        return LLMResponse(
            content=content,
            tool_calls=tool_calls,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            thinking_blocks=thinking_blocks,
            thinking=thinking,
        )


def _redacted(kwargs: dict[str, Any]) -> dict[str, Any]:
    if "api_key" not in kwargs:
        return kwargs
    return {**kwargs, "api_key": "***"}


def _thinking_blocks(message: Any) -> list[dict[str, Any]]:
    blocks = getattr(message, "thinking_blocks", None)
    if not isinstance(blocks, list):
        return []
    plain: list[dict[str, Any]] = []
    for block in blocks:
        if isinstance(block, dict):
            plain.append(dict(block))
        elif hasattr(block, "model_dump"):
            plain.append(block.model_dump())
    return plain


def _thinking_text(message: Any, blocks: list[dict[str, Any]]) -> str | None:
    reasoning = getattr(message, "reasoning_content", None)
    if isinstance(reasoning, str) and reasoning:
        return reasoning
    parts = [str(b["thinking"]) for b in blocks if b.get("type") == "thinking" and b.get("thinking")]
    return "\n\n".join(parts) or None
