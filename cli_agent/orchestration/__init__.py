"""
Orchestration core: tool catalog, dispatcher, completion classifier and
the Reason → Act → Evaluate loop.
"""

from .catalog import ToolCatalog, normalize_tool, snapshot, summarize, to_function_schema
from .classifier import CompletionClassifier, CompletionVerdict, KeywordCompletionClassifier
from .dispatcher import ToolDispatcher
from .validation import build_arguments_model, validate_arguments
from .loop import (
    ExecutedToolCall,
    LoopEvent,
    LoopResult,
    OrchestrationLoop,
    PhaseOutput,
    Session,
    TerminationReason,
)

__all__ = [
    "CompletionClassifier",
    "CompletionVerdict",
    "ExecutedToolCall",
    "KeywordCompletionClassifier",
    "LoopEvent",
    "LoopResult",
    "OrchestrationLoop",
    "PhaseOutput",
    "Session",
    "TerminationReason",
    "ToolCatalog",
    "ToolDispatcher",
    "build_arguments_model",
    "normalize_tool",
    "snapshot",
    "summarize",
    "to_function_schema",
    "validate_arguments",
]
