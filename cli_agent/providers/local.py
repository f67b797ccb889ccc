"""
In-process tool provider.

Holds a registry of Python handlers with their metadata and formatters.
Each provider owns its own registry; there is no global tool table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from ..errors import ProviderError
from ..models import ToolCallResult, ToolDescriptor
from ..orchestration.catalog import normalize_tool
from .base import BackendProvider

logger = logging.getLogger(__name__)


def _default_formatter(result: Any) -> str:
    return result if isinstance(result, str) else repr(result)


@dataclass
class LocalTool:
    """A registered tool: metadata, handler and result formatter."""

    descriptor: ToolDescriptor
    handler: Callable[[dict], Any]
    formatter: Callable[[Any], str] = _default_formatter


class LocalToolProvider(BackendProvider):
    """Serves tools implemented as Python callables."""

    def __init__(self, name: str = "local"):
        super().__init__(name)
        self._tools: dict[str, LocalTool] = {}

    def register(
        self,
        name: str,
        description: str,
        handler: Callable[[dict], Any],
        input_schema: Optional[dict] = None,
        formatter: Optional[Callable[[Any], str]] = None,
    ) -> ToolDescriptor:
        """Register a tool with its metadata."""
        descriptor = normalize_tool(
            {"name": name, "description": description, "inputSchema": input_schema},
            provider=self.name,
        )
        self._tools[name] = LocalTool(
            descriptor=descriptor,
            handler=handler,
            formatter=formatter or _default_formatter,
        )
        logger.debug("Registered tool '%s' on provider '%s'", name, self.name)
        return descriptor

    def tool(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        input_schema: Optional[dict] = None,
        formatter: Optional[Callable[[Any], str]] = None,
    ) -> Callable:
        """Decorator form of :meth:`register`; defaults come from the function."""

        def decorator(func: Callable[[dict], Any]) -> Callable[[dict], Any]:
            self.register(
                name=name or func.__name__,
                description=description or (func.__doc__ or "").strip(),
                handler=func,
                input_schema=input_schema,
                formatter=formatter,
            )
            return func

        return decorator

    def list_tools(self) -> list[ToolDescriptor]:
        return [t.descriptor for t in self._tools.values()]

    def call_tool(self, name: str, args: Mapping[str, Any]) -> ToolCallResult:
        tool = self._tools.get(name)
        if tool is None:
            raise ProviderError(self.name, f"Unknown tool: {name}")

        try:
            raw_result = tool.handler(dict(args))
            text = tool.formatter(raw_result)
        except Exception as e:
            logger.error("Tool '%s' execution failed on '%s': %s", name, self.name, e)
            raise ProviderError(self.name, f"Tool '{name}' execution error: {e}") from e

        return ToolCallResult(success=True, text=text, provider=self.name)
