"""
Reasoning backend interface.

A backend takes an ordered list of chat messages and returns the model's
reply. Transport failures are reported by returning ``None``; backends never
raise for the orchestration loop to catch.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..models import ToolCallRequest, ToolDescriptor


@dataclass
class ChatReply:
    """A reply from the reasoning backend."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)


class ChatBackend(ABC):
    """Interface shared by all reasoning backends."""

    #: Model used when a call does not name one.
    model: str

    @abstractmethod
    def chat(
        self,
        messages: list[dict],
        tools_enabled: bool,
        tool_catalog: Optional[Sequence[ToolDescriptor]] = None,
        model: Optional[str] = None,
    ) -> Optional[ChatReply]:
        """
        Send one chat request.

        Args:
            messages: Ordered ``{"role", "content"}`` messages.
            tools_enabled: Whether the model may request tool calls.
            tool_catalog: Tools offered to the model when enabled.
            model: Model override for this call.

        Returns:
            The reply, or None on transport failure.
        """

    @abstractmethod
    def list_models(self) -> list[str]:
        """Return the names of the models the backend serves, or [] on failure."""

    def is_available(self) -> bool:
        """Liveness check: True when the backend answers a model listing."""
        return bool(self.list_models())

    def close(self) -> None:
        """Release any underlying client."""
