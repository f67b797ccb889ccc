"""
Langfuse tracing integration.

Provides observability for loop phases, backend calls and tool executions.
"""

from .client import TracingClient
from .context import Generation, Observation, TracingContext

__all__ = [
    "TracingClient",
    "TracingContext",
    "Observation",
    "Generation",
]
