"""
Completion detection for the evaluation phase.

The loop only depends on the ``CompletionClassifier`` protocol, so the
keyword heuristic can be replaced by a structured completion signal.
"""

from dataclasses import dataclass
from typing import Protocol

DONE_MARKER = "**done**"
EVALUATION_COMPLETE = "task evaluation: complete"


@dataclass(frozen=True)
class CompletionVerdict:
    """Classifier decision for one evaluation text."""

    is_complete: bool


class CompletionClassifier(Protocol):
    def classify(self, evaluation_text: str) -> CompletionVerdict:
        ...


class KeywordCompletionClassifier:
    """
    Substring heuristic over the lower-cased evaluation text.

    Complete when the text contains ``**done**``, or
    ``task evaluation: complete``, or both ``complete`` and ``task``
    anywhere. The last rule also fires on "the task is not complete yet";
    callers rely on that behavior.
    """

    def classify(self, evaluation_text: str) -> CompletionVerdict:
        text = (evaluation_text or "").lower()
        is_complete = (
            DONE_MARKER in text
            or EVALUATION_COMPLETE in text
            or ("complete" in text and "task" in text)
        )
        return CompletionVerdict(is_complete=is_complete)
