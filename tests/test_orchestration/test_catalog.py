"""Tests for tool catalog aggregation and normalization."""

from unittest.mock import Mock

import pytest

from cli_agent.errors import ProviderError
from cli_agent.models import ParameterSpec, ToolDescriptor
from cli_agent.orchestration.catalog import (
    NO_DESCRIPTION,
    ToolCatalog,
    normalize_tool,
    snapshot,
    summarize,
    to_function_schema,
)


def _provider(name: str, tools=None, error=None) -> Mock:
    provider = Mock()
    provider.name = name
    provider.connected = True
    if error is not None:
        provider.list_tools.side_effect = error
    else:
        provider.list_tools.return_value = tools or []
    return provider


class TestNormalizeTool:
    """Tests for normalize_tool."""

    def test_full_metadata(self):
        descriptor = normalize_tool(
            {
                "name": "search",
                "description": "Search the web",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Search terms"},
                        "limit": {"type": "integer", "default": 5},
                        "mode": {"type": "string", "enum": ["fast", "deep"]},
                    },
                    "required": ["query"],
                },
            },
            provider="web",
        )

        assert descriptor.name == "search"
        assert descriptor.provider == "web"
        assert descriptor.required == ["query"]
        assert descriptor.parameters["limit"] == ParameterSpec(type="integer", default=5)
        assert descriptor.parameters["mode"].enum == ("fast", "deep")

    def test_missing_description(self):
        descriptor = normalize_tool({"name": "ping"})
        assert descriptor.description == NO_DESCRIPTION
        assert descriptor.parameters == {}

    def test_parameters_alias(self):
        """'parameters' is accepted in place of 'inputSchema'."""
        descriptor = normalize_tool(
            {"name": "echo", "parameters": {"properties": {"text": {"type": "string"}}}}
        )
        assert list(descriptor.parameters) == ["text"]

    def test_nullable_union_type(self):
        descriptor = normalize_tool(
            {"name": "t", "inputSchema": {"properties": {"n": {"type": ["null", "integer"]}}}}
        )
        assert descriptor.parameters["n"].type == "integer"

    def test_missing_name(self):
        with pytest.raises(ValueError):
            normalize_tool({"description": "anonymous"})

    @pytest.mark.parametrize(
        "schema",
        [
            {"properties": {"path": {"type": "string"}}, "required": True},
            {"properties": {"mode": {"type": "string", "enum": 5}}},
            {"properties": {"mode": {"enum": [{"nested": "object"}]}}},
            {"properties": {"path": {"type": {"kind": "string"}}}},
            {"properties": {"path": "string"}},
            {"properties": ["path"]},
            "not a schema",
        ],
    )
    def test_malformed_schema(self, schema):
        with pytest.raises(ValueError):
            normalize_tool({"name": "bad", "inputSchema": schema})


class TestRendering:
    """Tests for prompt summaries and function schemas."""

    def test_summarize(self):
        tools = [
            ToolDescriptor("list_files", "List files"),
            ToolDescriptor("read_file", "Read a file"),
        ]
        assert summarize(tools) == "list_files: List files\nread_file: Read a file"

    def test_summarize_empty(self):
        assert summarize([]) == ""

    def test_function_schema(self):
        descriptor = ToolDescriptor(
            "read_file",
            "Read a file",
            {
                "path": ParameterSpec(type="string", description="File path", required=True),
                "encoding": ParameterSpec(default="utf-8"),
            },
        )
        schema = to_function_schema(descriptor)

        assert schema["type"] == "function"
        function = schema["function"]
        assert function["name"] == "read_file"
        assert function["parameters"]["required"] == ["path"]
        assert function["parameters"]["properties"]["path"] == {
            "type": "string",
            "description": "File path",
        }
        assert function["parameters"]["properties"]["encoding"]["default"] == "utf-8"

    def test_function_schema_without_required(self):
        schema = to_function_schema(ToolDescriptor("ping", "Ping"))
        assert "required" not in schema["function"]["parameters"]

    def test_snapshot_first_wins(self):
        first = ToolDescriptor("search", "first", provider="a")
        second = ToolDescriptor("search", "second", provider="b")
        assert snapshot([first, second])["search"] is first


class TestToolCatalog:
    """Tests for ToolCatalog.list_all."""

    def test_registration_order(self):
        catalog = ToolCatalog(
            [
                _provider("a", [{"name": "one"}]),
                _provider("b", [{"name": "two"}, {"name": "three"}]),
            ]
        )
        tools = catalog.list_all()

        assert [t.name for t in tools] == ["one", "two", "three"]
        assert [t.provider for t in tools] == ["a", "b", "b"]

    def test_failing_provider_is_skipped(self):
        """A provider whose listing fails contributes nothing."""
        catalog = ToolCatalog(
            [
                _provider("broken", error=ProviderError("broken", "connection refused")),
                _provider("ok", [{"name": "ping"}]),
            ]
        )
        assert [t.name for t in catalog.list_all()] == ["ping"]

    def test_malformed_items_are_skipped(self):
        catalog = ToolCatalog([_provider("a", [{"description": "no name"}, {"name": "ok"}])])
        assert [t.name for t in catalog.list_all()] == ["ok"]

    def test_descriptors_are_stamped(self):
        catalog = ToolCatalog([_provider("local", [ToolDescriptor("ping", "Ping")])])
        assert catalog.list_all()[0].provider == "local"

    def test_disconnected_provider_is_queried(self):
        """Listing is how an unreachable provider comes back."""
        provider = _provider("remote", [{"name": "ping"}])
        provider.connected = False

        tools = ToolCatalog([provider]).list_all()

        provider.list_tools.assert_called_once()
        assert [t.name for t in tools] == ["ping"]

    def test_malformed_schema_does_not_break_listing(self):
        """One provider with broken schemas leaves the other tools listed."""
        catalog = ToolCatalog(
            [
                _provider(
                    "bad",
                    [
                        {"name": "required_flag", "inputSchema": {"required": True}},
                        {
                            "name": "scalar_enum",
                            "inputSchema": {"properties": {"mode": {"enum": 5}}},
                        },
                        "not a tool",
                    ],
                ),
                _provider("good", [{"name": "ping"}]),
            ]
        )
        assert [t.name for t in catalog.list_all()] == ["ping"]

    def test_non_list_listing(self):
        provider = _provider("odd")
        provider.list_tools.return_value = 42
        assert ToolCatalog([provider, _provider("ok", [{"name": "ping"}])]).list_all()[0].name == "ping"

    def test_no_providers(self):
        assert ToolCatalog().list_all() == []

    def test_duplicates_are_kept(self):
        catalog = ToolCatalog(
            [_provider("a", [{"name": "search"}]), _provider("b", [{"name": "search"}])]
        )
        assert len(catalog.list_all()) == 2
