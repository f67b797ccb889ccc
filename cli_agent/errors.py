"""
Exception hierarchy for the agent core.

Only configuration errors and backend unavailability are meant to escape
``OrchestrationLoop.run()``; everything else is converted to text inside
the loop so the reasoning backend can react to it.
"""

from typing import Optional, Sequence


class AgentError(Exception):
    """Base class for all agent errors."""


class ConfigurationError(AgentError):
    """Raised when configuration is missing or invalid."""


class BackendUnavailableError(AgentError):
    """Raised when the reasoning backend cannot be reached."""

    def __init__(self, message: str, history: Optional[list] = None):
        super().__init__(message)
        self.history = history or []


class ProviderError(AgentError):
    """Raised by a backend provider when it cannot list or execute a tool."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.reason = message


class ToolNotFoundError(AgentError):
    """Raised when no provider could execute the requested tool."""

    def __init__(self, tool_name: str, attempts: Sequence = ()):
        self.tool_name = tool_name
        self.attempts = list(attempts)
        tried = "; ".join(f"{a.provider}: {a.reason}" for a in self.attempts)
        message = f"Tool {tool_name} not found on any provider"
        if tried:
            message = f"{message} (tried {tried})"
        super().__init__(message)


class ToolArgumentError(AgentError):
    """Raised when tool arguments violate the tool's parameter schema."""

    def __init__(self, tool_name: str, problems: Sequence[str]):
        self.tool_name = tool_name
        self.problems = list(problems)
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': " + "; ".join(self.problems)
        )
