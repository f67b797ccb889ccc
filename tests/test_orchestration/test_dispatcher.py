"""Tests for the first-success tool dispatcher."""

from unittest.mock import Mock

import pytest

from cli_agent.errors import ProviderError, ToolArgumentError, ToolNotFoundError
from cli_agent.models import ParameterSpec, ToolCallResult, ToolDescriptor
from cli_agent.orchestration import ToolDispatcher


def _provider(name: str, result=None, error=None, connected: bool = True) -> Mock:
    provider = Mock()
    provider.name = name
    provider.connected = connected
    if error is not None:
        provider.call_tool.side_effect = error
    else:
        provider.call_tool.return_value = result
    return provider


COUNT_TOOL = ToolDescriptor(
    "count",
    "Count things",
    {
        "n": ParameterSpec(type="integer", required=True),
        "label": ParameterSpec(type="string"),
    },
)


class TestDispatch:
    """Tests for provider fallback."""

    def test_first_success_wins(self):
        first = _provider("first", ToolCallResult(True, "from first"))
        second = _provider("second", ToolCallResult(True, "from second"))
        dispatcher = ToolDispatcher([first, second])

        result = dispatcher.call("ping", {})

        assert result.text == "from first"
        assert result.provider == "first"
        second.call_tool.assert_not_called()

    def test_falls_back_on_error(self):
        failing = _provider("a", error=ProviderError("a", "Unknown tool: ping"))
        working = _provider("b", ToolCallResult(True, "pong"))

        result = ToolDispatcher([failing, working]).call("ping")

        assert result.text == "pong"
        assert result.provider == "b"
        failing.call_tool.assert_called_once_with("ping", {})

    def test_unsuccessful_result_still_wins(self):
        """A provider that returns (rather than raises) ends the chain."""
        erroring = _provider("a", ToolCallResult(False, "file not found"))
        other = _provider("b", ToolCallResult(True, "ok"))

        result = ToolDispatcher([erroring, other]).call("read")

        assert result.success is False
        other.call_tool.assert_not_called()

    def test_provider_name_is_kept(self):
        result = ToolCallResult(True, "ok", provider="upstream")
        assert ToolDispatcher([_provider("a", result)]).call("x").provider == "upstream"

    def test_all_fail(self):
        dispatcher = ToolDispatcher(
            [
                _provider("a", error=ProviderError("a", "Unknown tool: x")),
                _provider("b", error=RuntimeError("boom")),
            ]
        )
        with pytest.raises(ToolNotFoundError) as exc_info:
            dispatcher.call("x")

        error = exc_info.value
        assert error.tool_name == "x"
        assert [(a.provider, a.reason) for a in error.attempts] == [
            ("a", "Unknown tool: x"),
            ("b", "boom"),
        ]
        assert str(error) == (
            "Tool x not found on any provider (tried a: Unknown tool: x; b: boom)"
        )

    def test_no_providers(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            ToolDispatcher().call("x")
        assert str(exc_info.value) == "Tool x not found on any provider"

    def test_unreachable_provider_is_skipped(self):
        offline = _provider("offline", connected=False)
        online = _provider("online", ToolCallResult(True, "ok"))

        ToolDispatcher([offline, online]).call("x")

        offline.call_tool.assert_not_called()

    def test_unreachable_recorded_in_attempts(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            ToolDispatcher([_provider("offline", connected=False)]).call("x")
        assert exc_info.value.attempts[0].reason == "unreachable"


class TestArguments:
    """Tests for argument checks before dispatch."""

    @pytest.mark.parametrize("name", ["", None])
    def test_empty_name(self, name):
        with pytest.raises(ValueError):
            ToolDispatcher([_provider("a")]).call(name)

    def test_non_mapping_args(self):
        with pytest.raises(ValueError):
            ToolDispatcher([_provider("a")]).call("x", ["not", "a", "dict"])

    @pytest.mark.parametrize("args", [["5"], "", "n=5"])
    def test_non_mapping_args_with_descriptor(self, args):
        provider = _provider("a", ToolCallResult(True, "ok"))

        with pytest.raises(ToolArgumentError, match="arguments must be an object"):
            ToolDispatcher([provider]).call("count", args, COUNT_TOOL)
        provider.call_tool.assert_not_called()

    def test_validated_args_are_coerced(self):
        provider = _provider("a", ToolCallResult(True, "ok"))
        ToolDispatcher([provider]).call("count", {"n": "5"}, COUNT_TOOL)

        provider.call_tool.assert_called_once_with("count", {"n": 5})

    def test_invalid_args_never_reach_providers(self):
        provider = _provider("a", ToolCallResult(True, "ok"))

        with pytest.raises(ToolArgumentError):
            ToolDispatcher([provider]).call("count", {"label": "x"}, COUNT_TOOL)
        provider.call_tool.assert_not_called()

    def test_without_descriptor_args_pass_through(self):
        provider = _provider("a", ToolCallResult(True, "ok"))
        ToolDispatcher([provider]).call("anything", {"free": "form"})

        provider.call_tool.assert_called_once_with("anything", {"free": "form"})
