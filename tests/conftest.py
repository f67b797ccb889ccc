"""
Pytest configuration and fixtures for agent tests.
"""

from typing import Optional, Sequence

import pytest

from cli_agent.backends.base import ChatBackend, ChatReply
from cli_agent.models import ToolDescriptor
from cli_agent.providers import LocalToolProvider


class ScriptedBackend(ChatBackend):
    """Backend that replays canned replies and records every call.

    A reply may be a string (plain content), a ChatReply, or None
    (transport failure). Once the script runs out it keeps answering
    "Still working".
    """

    def __init__(self, replies: Sequence = (), model: str = "test-model", models=None):
        self.model = model
        self.models = [model] if models is None else list(models)
        self.calls: list[dict] = []
        self.closed = False
        self._replies = list(replies)

    def chat(
        self,
        messages: list[dict],
        tools_enabled: bool,
        tool_catalog: Optional[Sequence[ToolDescriptor]] = None,
        model: Optional[str] = None,
    ) -> Optional[ChatReply]:
        self.calls.append(
            {
                "messages": messages,
                "tools_enabled": tools_enabled,
                "tool_catalog": tool_catalog,
                "model": model,
            }
        )
        if not self._replies:
            return ChatReply(content="Still working")
        reply = self._replies.pop(0)
        if isinstance(reply, str):
            return ChatReply(content=reply)
        return reply

    def list_models(self) -> list[str]:
        return list(self.models)

    def close(self) -> None:
        self.closed = True


LIST_FILES_SCHEMA = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "description": "Directory to list"},
    },
    "required": ["path"],
}


@pytest.fixture
def file_provider():
    """Local provider with a list_files tool that records its calls."""
    provider = LocalToolProvider(name="filesystem")
    provider.calls = []

    def list_files(args):
        provider.calls.append(args)
        return ["a.txt", "b.txt"]

    provider.register(
        "list_files",
        "List files in a directory",
        list_files,
        input_schema=LIST_FILES_SCHEMA,
        formatter=lambda files: "\n".join(files),
    )
    return provider


@pytest.fixture
def scripted_backend():
    """Factory for ScriptedBackend instances."""

    def factory(*replies, **kwargs):
        return ScriptedBackend(replies, **kwargs)

    return factory
