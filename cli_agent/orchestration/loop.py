"""
Reason → Act → Evaluate orchestration loop.

Each iteration asks the reasoning backend for a plan (tools disabled),
then for tool calls (tools enabled) which are run through the dispatcher,
then for an evaluation (tools disabled) that the completion classifier
turns into a stop/continue decision. Tool results accumulate across
iterations and are fed back into the next plan.

Per-phase backend failures are replaced by sentinel text and the loop
moves on; only a run of consecutive backend failures aborts the session.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ..errors import BackendUnavailableError, ToolArgumentError, ToolNotFoundError
from ..models import ToolCallRequest, ToolCallResult, ToolDescriptor
from ..tracing import Observation, TracingClient, TracingContext
from .catalog import ToolCatalog, snapshot, summarize
from .classifier import CompletionClassifier, KeywordCompletionClassifier
from .dispatcher import ToolDispatcher
from .prompts import (
    build_evaluation_messages,
    build_execution_messages,
    build_reasoning_messages,
)

if TYPE_CHECKING:
    from ..backends.base import ChatBackend, ChatReply

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10
DEFAULT_MAX_CONSECUTIVE_FAILURES = 3

REASONING_FAILED = "Failed to generate reasoning"
EXECUTION_FAILED = "Failed to get response from AI"
NO_TOOLS_EXECUTED = "No tools were executed"
EVALUATION_FAILED = "Failed to evaluate task completion"
ITERATION_LIMIT_MESSAGE = (
    "I've reached the maximum number of iterations. Here's what I was able "
    "to accomplish with the available information."
)
CANCELLED_MESSAGE = "The request was cancelled before the task was finished."

MAX_ERROR_CHARS = 500


class TerminationReason(Enum):
    """Why a session ended."""

    DONE = "done"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    CANCELLED = "cancelled"


@dataclass
class ExecutedToolCall:
    """A tool call requested in ACT and what came back."""

    request: ToolCallRequest
    result: ToolCallResult


@dataclass
class PhaseOutput:
    """Transcript of one iteration."""

    iteration: int
    plan: str = ""
    tool_calls: list[ExecutedToolCall] = field(default_factory=list)
    results: list[str] = field(default_factory=list)
    evaluation: Optional[str] = None
    is_complete: bool = False


@dataclass
class Session:
    """State of one run of the loop; never reused across runs."""

    user_request: str
    model: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    iteration: int = 0
    tool_results: list[str] = field(default_factory=list)
    history: list[PhaseOutput] = field(default_factory=list)
    consecutive_failures: int = 0


@dataclass
class LoopResult:
    """Outcome of a complete run."""

    final_text: str
    termination_reason: TerminationReason
    iterations: list[PhaseOutput] = field(default_factory=list)
    tools_used: list[str] = field(default_factory=list)
    session_id: str = ""


@dataclass(frozen=True)
class LoopEvent:
    """Progress notification for observers."""

    kind: str
    iteration: int
    text: str = ""


class OrchestrationLoop:
    """
    Drives the reasoning backend through Reason → Act → Evaluate cycles.

    Per-iteration flow:
        1. List the tool catalog
        2. REASON: plan with the request, prior tool results and tool summary
        3. ACT: request tool calls and run each through the dispatcher
        4. EVALUATE: judge this iteration's results; classify completion
        5. Stop on completion, else carry all tool results into the next plan

    The loop stops after ``max_iterations`` iterations without completion.
    """

    def __init__(
        self,
        backend: "ChatBackend",
        catalog: ToolCatalog,
        dispatcher: ToolDispatcher,
        classifier: Optional[CompletionClassifier] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES,
        observer: Optional[Callable[[LoopEvent], None]] = None,
        tracing_client: Optional[TracingClient] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if max_consecutive_failures < 1:
            raise ValueError("max_consecutive_failures must be at least 1")

        self.backend = backend
        self.catalog = catalog
        self.dispatcher = dispatcher
        self.classifier = classifier or KeywordCompletionClassifier()
        self.max_iterations = max_iterations
        self.max_consecutive_failures = max_consecutive_failures
        self.observer = observer
        self.tracing_client = tracing_client
        self._cancel_requested = threading.Event()

    def cancel(self) -> None:
        """
        Stop the running session at the next phase boundary.

        A request made while no session is running cancels the next one
        before its first iteration. The flag is cleared when a run ends.
        """
        self._cancel_requested.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def run(self, user_request: str, model: Optional[str] = None) -> LoopResult:
        """
        Run the loop for one user request.

        Args:
            user_request: The user's task.
            model: Reasoning model for this session (backend default if None).

        Returns:
            LoopResult with the final text and why the session ended.

        Raises:
            ValueError: If the request is empty.
            BackendUnavailableError: After too many consecutive backend failures.
        """
        if not isinstance(user_request, str) or not user_request.strip():
            raise ValueError("User request must be a non-empty string")

        session = Session(user_request=user_request, model=model or self.backend.model)
        trace = TracingContext(self.tracing_client, session.session_id)
        trace.start_trace(query=user_request)

        logger.debug("[%s] Starting session for: %s", session.session_id, user_request)
        try:
            result = self._run_loop(session, trace)
        except BackendUnavailableError:
            trace.end_trace(status="error")
            self._log_trace_summary(session)
            raise
        finally:
            self._cancel_requested.clear()
        trace.end_trace(output=result.final_text[:500])
        self._log_trace_summary(session)
        return result

    def _run_loop(self, session: Session, trace: TracingContext) -> LoopResult:
        while session.iteration < self.max_iterations:
            if self.cancelled:
                return self._cancel(session)
            number = session.iteration + 1
            output = PhaseOutput(iteration=number)
            self._emit("iteration_started", number)

            tools = self.catalog.list_all()

            with trace.span(f"iteration_{number}:reason") as span:
                output.plan = self._reason(session, tools, span)
            self._emit("plan", number, output.plan)
            if self.cancelled:
                return self._cancel(session, output)

            with trace.span(f"iteration_{number}:act") as span:
                output.tool_calls, output.results = self._act(
                    session, output.plan, tools, span
                )
                span.set_output({"results": len(output.results)})
            session.tool_results.extend(output.results)
            if self.cancelled:
                return self._cancel(session, output)

            with trace.span(f"iteration_{number}:evaluate") as span:
                output.evaluation, output.is_complete = self._evaluate(
                    session, output.plan, output.results, span
                )
                span.set_output({"is_complete": output.is_complete})
            self._emit("evaluation", number, output.evaluation)
            session.history.append(output)

            if output.is_complete:
                self._emit("completed", number, output.evaluation)
                return self._result(session, output.evaluation, TerminationReason.DONE)

            session.iteration += 1

        logger.warning(
            "[%s] Maximum iterations (%d) reached", session.session_id, self.max_iterations
        )
        final_text = ITERATION_LIMIT_MESSAGE
        last_evaluation = self._last_evaluation(session)
        if last_evaluation:
            final_text = f"{final_text}\n\n{last_evaluation}"
        self._emit("limit_reached", session.iteration, final_text)
        return self._result(session, final_text, TerminationReason.ITERATION_LIMIT_REACHED)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _reason(
        self, session: Session, tools: Sequence[ToolDescriptor], span: Observation
    ) -> str:
        messages = build_reasoning_messages(
            session.user_request, summarize(tools), session.tool_results
        )
        reply = self._call_backend(session, "reason", messages, False, None, span)
        if reply is None:
            return REASONING_FAILED
        return reply.content or REASONING_FAILED

    def _act(
        self,
        session: Session,
        plan: str,
        tools: Sequence[ToolDescriptor],
        span: Observation,
    ) -> tuple[list[ExecutedToolCall], list[str]]:
        messages = build_execution_messages(plan, session.user_request, summarize(tools))
        reply = self._call_backend(session, "act", messages, True, tools, span)
        if reply is None:
            return [], [EXECUTION_FAILED]
        if not reply.tool_calls:
            logger.debug("[%s] No tools needed for this step", session.session_id)
            return [], [NO_TOOLS_EXECUTED]

        by_name = snapshot(tools)
        executed: list[ExecutedToolCall] = []
        results: list[str] = []
        for request in reply.tool_calls:
            with span.span(f"tool:{request.name}", input=request.arguments) as tool_span:
                result = self._execute_tool(session, request, by_name)
                tool_span.set_output({"result": result.text[:500]})
                if not result.success:
                    tool_span.set_status("error")
            executed.append(ExecutedToolCall(request=request, result=result))
            results.append(result.text)
            self._emit("tool_result", session.iteration + 1, result.text)
        return executed, results

    def _evaluate(
        self,
        session: Session,
        plan: str,
        iteration_results: Sequence[str],
        span: Observation,
    ) -> tuple[str, bool]:
        messages = build_evaluation_messages(session.user_request, plan, iteration_results)
        reply = self._call_backend(session, "evaluate", messages, False, None, span)
        if reply is None or not reply.content:
            # Never classify the sentinel: it would read as "task ... complete".
            return EVALUATION_FAILED, False
        verdict = self.classifier.classify(reply.content)
        logger.debug("[%s] Evaluation is_complete=%s", session.session_id, verdict.is_complete)
        return reply.content, verdict.is_complete

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _execute_tool(
        self,
        session: Session,
        request: ToolCallRequest,
        by_name: dict[str, ToolDescriptor],
    ) -> ToolCallResult:
        """Run one tool call; every failure becomes a textual result."""
        descriptor = by_name.get(request.name)
        if descriptor is None:
            logger.warning("[%s] Unknown tool: %s", session.session_id, request.name)
            return ToolCallResult(
                success=False,
                text=f"Tool execution failed: Unknown tool '{request.name}'",
            )

        logger.debug("[%s] Calling tool '%s'", session.session_id, request.name)
        try:
            return self.dispatcher.call(request.name, request.arguments, descriptor)
        except (ToolNotFoundError, ToolArgumentError, ValueError) as e:
            logger.error("[%s] Tool '%s' failed: %s", session.session_id, request.name, e)
            error_msg = str(e)
            if len(error_msg) > MAX_ERROR_CHARS:
                error_msg = error_msg[:MAX_ERROR_CHARS] + "..."
            return ToolCallResult(success=False, text=f"Tool execution failed: {error_msg}")

    def _call_backend(
        self,
        session: Session,
        phase: str,
        messages: list[dict],
        tools_enabled: bool,
        tools: Optional[Sequence[ToolDescriptor]],
        span: Observation,
    ) -> Optional["ChatReply"]:
        """Call the backend, tracking consecutive transport failures."""
        number = session.iteration + 1
        with span.generation(
            name=f"{phase}_{number}", model=session.model, input=messages
        ) as gen:
            reply = self.backend.chat(
                messages,
                tools_enabled=tools_enabled,
                tool_catalog=list(tools) if tools_enabled and tools else None,
                model=session.model,
            )
            if reply is None:
                gen.set_status("error")
            else:
                gen.set_output(reply.content[:2000])

        if reply is not None:
            session.consecutive_failures = 0
            return reply

        session.consecutive_failures += 1
        logger.error(
            "[%s] Backend call failed in %s phase of iteration %d (%d consecutive)",
            session.session_id,
            phase,
            number,
            session.consecutive_failures,
        )
        if session.consecutive_failures >= self.max_consecutive_failures:
            raise BackendUnavailableError(
                f"Reasoning backend failed {session.consecutive_failures} "
                "consecutive times; aborting session",
                history=list(session.history),
            )
        return None

    def _cancel(self, session: Session, partial: Optional[PhaseOutput] = None) -> LoopResult:
        if partial is not None:
            session.history.append(partial)
        logger.info("[%s] Session cancelled", session.session_id)
        final_text = CANCELLED_MESSAGE
        latest = self._last_evaluation(session)
        if latest is None and partial is not None and partial.plan != REASONING_FAILED:
            latest = partial.plan
        if latest:
            final_text = f"{final_text}\n\n{latest}"
        self._emit("cancelled", session.iteration + 1, final_text)
        return self._result(session, final_text, TerminationReason.CANCELLED)

    @staticmethod
    def _last_evaluation(session: Session) -> Optional[str]:
        for output in reversed(session.history):
            if output.evaluation and output.evaluation != EVALUATION_FAILED:
                return output.evaluation
        return None

    @staticmethod
    def _result(session: Session, final_text: str, reason: TerminationReason) -> LoopResult:
        tools_used: list[str] = []
        for output in session.history:
            for call in output.tool_calls:
                if call.request.name not in tools_used:
                    tools_used.append(call.request.name)
        return LoopResult(
            final_text=final_text,
            termination_reason=reason,
            iterations=list(session.history),
            tools_used=tools_used,
            session_id=session.session_id,
        )

    def _emit(self, kind: str, iteration: int, text: str = "") -> None:
        if self.observer is None:
            return
        try:
            self.observer(LoopEvent(kind=kind, iteration=iteration, text=text))
        except Exception as e:
            logger.warning("Loop observer failed on '%s' event: %s", kind, e)

    def _log_trace_summary(self, session: Session) -> None:
        """Log a compact trace summary."""
        prefix = f"[{session.session_id}] "
        logger.info("%s%s", prefix, "─" * 50)
        logger.info("%sTRACE SUMMARY", prefix)
        logger.info("%s%s", prefix, "─" * 50)
        for output in session.history:
            tools = ", ".join(c.request.name for c in output.tool_calls) or "-"
            logger.info(
                "%sIteration %d: tools=%s complete=%s",
                prefix,
                output.iteration,
                tools,
                output.is_complete,
            )
