"""
CLI Agent - a tool-using agent driven by a Reason → Act → Evaluate loop.
"""

__version__ = "0.1.0"

from .agent import ToolAgent
from .errors import (
    AgentError,
    BackendUnavailableError,
    ConfigurationError,
    ProviderError,
    ToolArgumentError,
    ToolNotFoundError,
)
from .orchestration import LoopResult, OrchestrationLoop, TerminationReason

__all__ = [
    "AgentError",
    "BackendUnavailableError",
    "ConfigurationError",
    "LoopResult",
    "OrchestrationLoop",
    "ProviderError",
    "TerminationReason",
    "ToolAgent",
    "ToolArgumentError",
    "ToolNotFoundError",
]
