"""
Backend provider interface.

A provider is an external source of tools. ``list_tools`` and
``call_tool`` may raise; the catalog and dispatcher absorb those failures.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence, Union

from ..models import ToolCallResult, ToolDescriptor


class BackendProvider(ABC):
    """A named source of callable tools."""

    def __init__(self, name: str):
        self.name = name
        self._connected = True

    @property
    def connected(self) -> bool:
        """False once the provider is known to be unreachable."""
        return self._connected

    @abstractmethod
    def list_tools(self) -> Sequence[Union[ToolDescriptor, Mapping[str, Any]]]:
        """Return the provider's tools as descriptors or MCP-style metadata."""

    @abstractmethod
    def call_tool(self, name: str, args: Mapping[str, Any]) -> ToolCallResult:
        """Execute ``name`` with ``args``; raise if the tool cannot be run here."""

    def close(self) -> None:
        """Release provider resources."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, connected={self._connected})"
