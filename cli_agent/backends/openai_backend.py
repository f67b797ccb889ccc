"""
OpenAI-compatible reasoning backend.

Works with vLLM, SGLang, LiteLLM, Ollama's ``/v1`` endpoint and the
OpenAI API itself.
"""

import logging
from typing import Optional, Sequence

import json_repair
from openai import OpenAI

from ..models import ToolCallRequest, ToolDescriptor
from ..orchestration.catalog import to_function_schema
from .base import ChatBackend, ChatReply

logger = logging.getLogger(__name__)


class OpenAIChatBackend(ChatBackend):
    """Reasoning backend speaking the OpenAI chat completions protocol."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        timeout: int = 120,
    ):
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self._client = OpenAI(
            base_url=base_url,
            api_key=api_key or "not-needed",  # local servers do not require auth
            timeout=timeout,
        )

    def chat(
        self,
        messages: list[dict],
        tools_enabled: bool,
        tool_catalog: Optional[Sequence[ToolDescriptor]] = None,
        model: Optional[str] = None,
    ) -> Optional[ChatReply]:
        create_kwargs: dict = {
            "model": model or self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        # Only pass tools when enabled and non-empty; some servers reject []
        if tools_enabled and tool_catalog:
            create_kwargs["tools"] = [to_function_schema(t) for t in tool_catalog]

        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except Exception as e:
            logger.error("Chat request to %s failed: %s", self.base_url, e)
            return None

        try:
            message = response.choices[0].message
            content = message.content or ""
            tool_calls = self._parse_tool_calls(message.tool_calls)
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            logger.error("Malformed chat response from %s: %s", self.base_url, e)
            return None

        if not isinstance(content, str):
            logger.error("Non-text chat content from %s: %r", self.base_url, content)
            return None
        return ChatReply(content=content, tool_calls=tool_calls)

    @staticmethod
    def _parse_tool_calls(raw_calls) -> list[ToolCallRequest]:
        """Convert SDK tool calls into ToolCallRequests.

        Arguments arrive as a JSON string that models sometimes emit
        malformed, so they are parsed with json_repair. Anything that does
        not parse to an object is passed on unchanged.
        """
        calls: list[ToolCallRequest] = []
        for raw in raw_calls or []:
            function = getattr(raw, "function", None)
            name = getattr(function, "name", None)
            if not name:
                continue
            arguments = getattr(function, "arguments", None)
            if arguments is None or (isinstance(arguments, str) and not arguments.strip()):
                arguments = {}
            elif isinstance(arguments, str):
                arguments = json_repair.loads(arguments)
            if not isinstance(arguments, dict):
                # Left as-is; argument validation rejects it before dispatch.
                logger.warning("Non-object arguments for tool '%s': %r", name, arguments)
            calls.append(ToolCallRequest(name=name, arguments=arguments))
        return calls

    def list_models(self) -> list[str]:
        try:
            return [m.id for m in self._client.models.list()]
        except Exception as e:
            logger.error("Listing models from %s failed: %s", self.base_url, e)
            return []

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Error closing OpenAI client: %s", e)
