"""
Tool dispatcher: a first-success fallback chain over backend providers.

Providers are tried in registration order and the first one whose
``call_tool`` returns without raising wins. Providers tried before the
winner are not told they lost, so a failed attempt may already have
changed external state.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from ..errors import ProviderError, ToolNotFoundError
from ..models import DispatchAttempt, ToolCallResult, ToolDescriptor
from .validation import validate_arguments

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Routes a tool call to the first provider that executes it."""

    def __init__(self, providers: Optional[Sequence] = None):
        self._providers = list(providers or [])

    def call(
        self,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
        descriptor: Optional[ToolDescriptor] = None,
    ) -> ToolCallResult:
        """
        Execute a tool on the first provider that accepts it.

        Args:
            name: Tool name.
            args: Tool arguments (may be empty).
            descriptor: When given, ``args`` are validated against its
                parameter schema before any provider is contacted.

        Returns:
            The winning provider's ToolCallResult.

        Raises:
            ValueError: If ``name`` is empty, or ``args`` is not a mapping
                and there is no descriptor to validate against.
            ToolArgumentError: If ``args`` violate the descriptor's schema
                (including not being an object).
            ToolNotFoundError: If every provider failed or was unreachable.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Tool name must be a non-empty string")
        if args is None:
            args = {}
        if descriptor is not None:
            arguments = validate_arguments(descriptor, args)
        elif isinstance(args, Mapping):
            arguments = dict(args)
        else:
            raise ValueError(f"Arguments for tool '{name}' must be a mapping")

        attempts: list[DispatchAttempt] = []

        for provider in self._providers:
            if not provider.connected:
                attempts.append(DispatchAttempt(provider.name, False, "unreachable"))
                continue
            try:
                result = provider.call_tool(name, arguments)
            except Exception as e:
                if isinstance(e, ProviderError):
                    reason = e.reason
                else:
                    reason = str(e) or type(e).__name__
                logger.debug("Provider '%s' could not run '%s': %s", provider.name, name, reason)
                attempts.append(DispatchAttempt(provider.name, False, reason))
                continue

            attempts.append(DispatchAttempt(provider.name, True))
            if result.provider is None:
                result.provider = provider.name
            logger.debug("Tool '%s' executed by provider '%s'", name, provider.name)
            return result

        raise ToolNotFoundError(name, attempts)
