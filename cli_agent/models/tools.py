"""
Data models for tools, tool calls and their results.

Providers describe their tools with heterogeneous metadata; the catalog
normalizes it into ``ToolDescriptor`` instances defined here.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ParameterSpec:
    """Schema of a single tool parameter."""

    type: str = "string"
    description: str = ""
    required: bool = False
    default: Any = None
    enum: Optional[tuple] = None


@dataclass(frozen=True)
class ToolDescriptor:
    """One callable capability exposed by a backend provider."""

    name: str
    description: str
    parameters: dict[str, ParameterSpec] = field(default_factory=dict)
    provider: str = ""

    @property
    def required(self) -> list[str]:
        """Names of required parameters, in declaration order."""
        return [name for name, spec in self.parameters.items() if spec.required]


@dataclass(frozen=True)
class ToolCallRequest:
    """A single tool invocation requested by the reasoning backend.

    ``arguments`` is kept exactly as the model sent it, even when it is not
    an object, so that validation can reject it before dispatch.
    """

    name: str
    arguments: Any = field(default_factory=dict)


@dataclass
class ToolCallResult:
    """Outcome of executing one tool call."""

    success: bool
    text: str
    provider: Optional[str] = None


@dataclass(frozen=True)
class DispatchAttempt:
    """Record of one provider tried by the dispatcher."""

    provider: str
    succeeded: bool
    reason: str = ""
