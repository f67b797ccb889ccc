"""
Session-scoped tracing context using the Langfuse SDK v3.

One ``TracingContext`` covers one orchestration session. It opens a root
span for the session, and hands out nested spans (loop phases, tool calls)
and generations (backend calls). Parent links are passed explicitly via
``TraceContext`` so nesting does not depend on OpenTelemetry context state.
Everything is a no-op when the client is disabled.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Generator, Optional

from langfuse.types import TraceContext

from .client import TracingClient

logger = logging.getLogger(__name__)


class Observation:
    """A span or generation; collects output/status and reports them on end."""

    as_type = "span"

    def __init__(
        self,
        client: Optional[TracingClient],
        name: str,
        parent: Optional[TraceContext] = None,
        **attributes: Any,
    ):
        self.name = name
        self._client = client
        self._parent = parent
        self._attributes = {k: v for k, v in attributes.items() if v is not None}
        self._manager: Any = None
        self._observation: Any = None
        self._started = 0.0
        self._update: dict[str, Any] = {}
        self._status = "success"

    @property
    def enabled(self) -> bool:
        return self._client is not None and self._client.enabled

    def start(self) -> None:
        if not self.enabled:
            return
        self._started = time.time()
        try:
            self._manager = self._client.client.start_as_current_observation(
                trace_context=self._parent,
                as_type=self.as_type,
                name=self.name,
                **self._attributes,
            )
            self._observation = self._manager.__enter__()
        except Exception as e:
            logger.warning("Failed to start %s '%s': %s", self.as_type, self.name, e)
            self._observation = None

    def end(self) -> None:
        if self._observation is None:
            return
        try:
            metadata = {
                "status": self._status,
                "duration_ms": round((time.time() - self._started) * 1000, 2),
            }
            self._observation.update(metadata=metadata, **self._update)
            self._manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning("Failed to end %s '%s': %s", self.as_type, self.name, e)

    def set_output(self, output: Any) -> None:
        self._update["output"] = output

    def set_status(self, status: str) -> None:
        self._status = status

    def child_context(self) -> Optional[TraceContext]:
        """TraceContext that makes new observations children of this one."""
        span_id = getattr(self._observation, "id", None)
        if not self._parent or not span_id:
            return self._parent
        return TraceContext(trace_id=self._parent["trace_id"], parent_span_id=span_id)

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Generator["Observation", None, None]:
        with _observe(Observation(self._client, name, self.child_context(), **attributes)) as obs:
            yield obs

    @contextmanager
    def generation(self, name: str, model: str, **attributes: Any) -> Generator["Generation", None, None]:
        gen = Generation(self._client, name, self.child_context(), model=model, **attributes)
        with _observe(gen) as obs:
            yield obs


class Generation(Observation):
    """An LLM call."""

    as_type = "generation"


@contextmanager
def _observe(observation: Observation) -> Generator:
    try:
        observation.start()
        yield observation
    finally:
        observation.end()


class TracingContext:
    """Root of the trace for one orchestration session."""

    def __init__(
        self,
        client: Optional[TracingClient],
        session_id: str,
        user_id: Optional[str] = None,
    ):
        self.session_id = session_id
        self.user_id = user_id
        self._client = client
        self._root: Optional[Observation] = None

    @property
    def enabled(self) -> bool:
        return self._client is not None and self._client.enabled

    def start_trace(self, name: str = "agent_session", query: Optional[str] = None) -> None:
        """Open the root span for this session."""
        if not self.enabled:
            return
        root = Observation(
            self._client,
            name,
            input={"query": query} if query else None,
            metadata={"session_id": self.session_id},
        )
        root.start()
        if root._observation is None:
            return
        try:
            root._observation.update_trace(user_id=self.user_id, session_id=self.session_id)
        except Exception as e:
            logger.warning("[%s] Failed to set trace attributes: %s", self.session_id, e)
        self._root = root

    def end_trace(self, output: Optional[str] = None, status: str = "success") -> None:
        if self._root is None:
            return
        self._root.set_output(output)
        self._root.set_status(status)
        self._root.end()
        self._root = None

    def _root_context(self) -> Optional[TraceContext]:
        if self._root is None or self._root._observation is None:
            return None
        trace_id = getattr(self._root._observation, "trace_id", None)
        span_id = getattr(self._root._observation, "id", None)
        if not trace_id or not span_id:
            return None
        return TraceContext(trace_id=trace_id, parent_span_id=span_id)

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Generator[Observation, None, None]:
        client = self._client if self.enabled else None
        with _observe(Observation(client, name, self._root_context(), **attributes)) as obs:
            yield obs
