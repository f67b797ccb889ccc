"""
Ollama-native reasoning backend.

Talks to Ollama's ``/api/chat`` and ``/api/tags`` endpoints directly.
"""

import logging
from typing import Any, Optional, Sequence

import requests

from ..models import ToolCallRequest, ToolDescriptor
from ..orchestration.catalog import to_function_schema
from .base import ChatBackend, ChatReply

logger = logging.getLogger(__name__)


class OllamaChatBackend(ChatBackend):
    """Reasoning backend for a local or remote Ollama server."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2",
        temperature: float = 0.7,
        timeout: int = 120,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def chat(
        self,
        messages: list[dict],
        tools_enabled: bool,
        tool_catalog: Optional[Sequence[ToolDescriptor]] = None,
        model: Optional[str] = None,
    ) -> Optional[ChatReply]:
        payload: dict = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if tools_enabled and tool_catalog:
            payload["tools"] = [to_function_schema(t) for t in tool_catalog]

        try:
            response = requests.post(
                f"{self.base_url}/api/chat",
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            message = response.json()["message"]
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as e:
            logger.error("Ollama chat request to %s failed: %s", self.base_url, e)
            return None

        if not isinstance(message, dict):
            logger.error("Malformed Ollama chat response from %s: %r", self.base_url, message)
            return None
        content = message.get("content") or ""
        if not isinstance(content, str):
            logger.error("Non-text Ollama chat content from %s: %r", self.base_url, content)
            return None
        return ChatReply(
            content=content,
            tool_calls=self._parse_tool_calls(message.get("tool_calls")),
        )

    @staticmethod
    def _parse_tool_calls(raw_calls: Any) -> list[ToolCallRequest]:
        """Convert Ollama tool calls into ToolCallRequests.

        Malformed entries are skipped. Arguments that are not an object are
        passed on unchanged.
        """
        calls: list[ToolCallRequest] = []
        if not isinstance(raw_calls, list):
            return calls
        for raw in raw_calls:
            function = raw.get("function") if isinstance(raw, dict) else None
            if not isinstance(function, dict):
                logger.warning("Skipping malformed tool call: %r", raw)
                continue
            name = function.get("name")
            if not name or not isinstance(name, str):
                continue
            arguments = function.get("arguments")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                logger.warning("Non-object arguments for tool '%s': %r", name, arguments)
            calls.append(ToolCallRequest(name=name, arguments=arguments))
        return calls

    def list_models(self) -> list[str]:
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=self.timeout)
            response.raise_for_status()
            return [m["name"] for m in response.json().get("models", [])]
        except (
            requests.exceptions.RequestException,
            ValueError,
            KeyError,
            AttributeError,
            TypeError,
        ) as e:
            logger.error("Listing Ollama models from %s failed: %s", self.base_url, e)
            return []
