"""
Tests for Langfuse tracing integration with SDK v3.

Tests cover:
- Client disabled states (credentials, auth failure, SDK errors)
- Context manager no-ops when disabled
- Parent linking with mocked Langfuse
- Loop integration with tracing enabled
"""

from unittest.mock import MagicMock, patch

from cli_agent.backends.base import ChatReply
from cli_agent.models import LangfuseConfig
from cli_agent.orchestration import OrchestrationLoop, ToolCatalog, ToolDispatcher
from cli_agent.tracing import TracingClient, TracingContext


def _enabled_client():
    """TracingClient backed by a MagicMock Langfuse whose root has fixed ids."""
    with patch("cli_agent.tracing.client.Langfuse") as mock_langfuse_cls:
        langfuse = mock_langfuse_cls.return_value
        langfuse.auth_check.return_value = True
        client = TracingClient(public_key="pk-test", secret_key="sk-test", host="http://lf:3000")

    observation = MagicMock()
    observation.trace_id = "trace-1"
    observation.id = "span-1"
    langfuse.start_as_current_observation.return_value.__enter__.return_value = observation
    return client, langfuse, observation


class TestTracingClient:
    """Tests for TracingClient."""

    def test_disabled_without_credentials(self):
        client = TracingClient(public_key="", secret_key="")
        assert client.enabled is False
        assert "credentials not configured" in client.error.lower()

    def test_disabled_with_partial_credentials(self):
        assert TracingClient(public_key="pk-test", secret_key="").enabled is False

    @patch("cli_agent.tracing.client.Langfuse")
    def test_auth_failure(self, mock_langfuse_cls):
        mock_langfuse_cls.return_value.auth_check.return_value = False
        client = TracingClient(public_key="pk", secret_key="sk")

        assert client.enabled is False
        assert "auth_check" in client.error

    @patch("cli_agent.tracing.client.Langfuse")
    def test_sdk_error(self, mock_langfuse_cls):
        mock_langfuse_cls.side_effect = RuntimeError("bad host")
        client = TracingClient(public_key="pk", secret_key="sk")

        assert client.enabled is False
        assert "bad host" in client.error

    @patch("cli_agent.tracing.client.Langfuse")
    def test_from_config(self, mock_langfuse_cls):
        mock_langfuse_cls.return_value.auth_check.return_value = True
        client = TracingClient.from_config(
            LangfuseConfig(public_key="pk", secret_key="sk", host="http://lf:3000")
        )

        assert client.enabled is True
        assert mock_langfuse_cls.call_args.kwargs["host"] == "http://lf:3000"

    def test_shutdown(self):
        client, langfuse, _ = _enabled_client()
        client.shutdown()

        langfuse.shutdown.assert_called_once()
        assert client.enabled is False

    def test_flush_when_disabled(self):
        TracingClient().flush()


class TestTracingContextDisabled:
    """Every call is a no-op without a working client."""

    def test_noop(self):
        context = TracingContext(None, session_id="s1")
        context.start_trace(query="hello")

        with context.span("phase") as span:
            span.set_output({"x": 1})
            with span.generation("call", model="m") as gen:
                gen.set_output("reply")
        context.end_trace(output="done")

        assert context.enabled is False


class TestTracingContextEnabled:
    """Observations are linked to the session root."""

    def test_children_link_to_root(self):
        client, langfuse, observation = _enabled_client()
        context = TracingContext(client, session_id="s1", user_id="u1")

        context.start_trace(query="hello")
        observation.update_trace.assert_called_once_with(user_id="u1", session_id="s1")

        with context.span("iteration_1:reason") as span:
            with span.generation("reason_1", model="m"):
                pass

        kwargs = langfuse.start_as_current_observation.call_args.kwargs
        assert kwargs["as_type"] == "generation"
        assert kwargs["name"] == "reason_1"
        assert kwargs["trace_context"] == {"trace_id": "trace-1", "parent_span_id": "span-1"}

    def test_end_trace_reports_status(self):
        client, _, observation = _enabled_client()
        context = TracingContext(client, session_id="s1")
        context.start_trace()
        context.end_trace(output="answer", status="error")

        kwargs = observation.update.call_args.kwargs
        assert kwargs["output"] == "answer"
        assert kwargs["metadata"]["status"] == "error"

    def test_start_failure_is_tolerated(self):
        client, langfuse, _ = _enabled_client()
        langfuse.start_as_current_observation.side_effect = RuntimeError("otel broke")
        context = TracingContext(client, session_id="s1")

        context.start_trace()
        with context.span("phase") as span:
            span.set_output("ignored")
        context.end_trace()


class TestLoopTracing:
    def test_loop_records_phases(self, scripted_backend):
        client, langfuse, _ = _enabled_client()
        loop = OrchestrationLoop(
            backend=scripted_backend("plan", ChatReply(), "**DONE**"),
            catalog=ToolCatalog(),
            dispatcher=ToolDispatcher(),
            tracing_client=client,
        )
        loop.run("hello")

        names = [c.kwargs["name"] for c in langfuse.start_as_current_observation.call_args_list]
        assert names[0] == "agent_session"
        assert "iteration_1:reason" in names
        assert "reason_1" in names
        assert "evaluate_1" in names
