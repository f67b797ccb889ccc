"""
Tool catalog for the orchestration loop.

Collects tool metadata from every registered provider, normalizes it into
``ToolDescriptor`` instances and renders it in the two forms the loop
needs: OpenAI-style function schemas for the backend, and a plain
``name: description`` summary for prompts.
"""

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from ..models import ParameterSpec, ToolDescriptor

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"


def normalize_tool(raw: Mapping[str, Any], provider: str = "") -> ToolDescriptor:
    """
    Convert MCP-style tool metadata into a ToolDescriptor.

    Accepts ``{"name", "description", "inputSchema"}``; ``parameters`` is
    accepted as an alias for ``inputSchema``.

    Raises:
        ValueError: If the tool has no name or its schema is malformed.
    """
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"Tool metadata without a name: {raw!r}")

    schema = raw.get("inputSchema") or raw.get("parameters") or {}
    if not isinstance(schema, Mapping):
        raise ValueError(f"Tool '{name}' has a non-object input schema")
    properties = schema.get("properties") or {}
    if not isinstance(properties, Mapping):
        raise ValueError(f"Tool '{name}' has non-object schema properties")
    required = schema.get("required") or []
    if not isinstance(required, list):
        raise ValueError(f"Tool '{name}' has a non-list 'required'")
    required = {r for r in required if isinstance(r, str)}

    parameters: dict[str, ParameterSpec] = {}
    for param_name, prop in properties.items():
        prop = prop or {}
        if not isinstance(prop, Mapping):
            raise ValueError(f"Tool '{name}' parameter '{param_name}' is not an object")
        param_type = prop.get("type", "string")
        if isinstance(param_type, list):
            # ["string", "null"] style unions: keep the first concrete type
            param_type = next((t for t in param_type if t != "null"), "string")
        if not isinstance(param_type, str):
            raise ValueError(f"Tool '{name}' parameter '{param_name}' has a non-string type")
        enum = prop.get("enum")
        if enum is not None and not isinstance(enum, list):
            raise ValueError(f"Tool '{name}' parameter '{param_name}' has a non-list enum")
        if enum and not all(isinstance(v, (str, int, bool)) for v in enum):
            raise ValueError(f"Tool '{name}' parameter '{param_name}' has non-scalar enum values")
        parameters[param_name] = ParameterSpec(
            type=param_type,
            description=prop.get("description", ""),
            required=param_name in required,
            default=prop.get("default"),
            enum=tuple(enum) if enum else None,
        )

    return ToolDescriptor(
        name=name,
        description=raw.get("description") or NO_DESCRIPTION,
        parameters=parameters,
        provider=provider,
    )


def to_function_schema(descriptor: ToolDescriptor) -> dict:
    """Render a descriptor as an OpenAI/Ollama function-calling tool."""
    properties: dict = {}
    for param_name, spec in descriptor.parameters.items():
        prop: dict = {"type": spec.type}
        if spec.description:
            prop["description"] = spec.description
        if spec.default is not None:
            prop["default"] = spec.default
        if spec.enum:
            prop["enum"] = list(spec.enum)
        properties[param_name] = prop

    parameters: dict = {"type": "object", "properties": properties}
    if descriptor.required:
        parameters["required"] = descriptor.required

    return {
        "type": "function",
        "function": {
            "name": descriptor.name,
            "description": descriptor.description,
            "parameters": parameters,
        },
    }


def summarize(descriptors: Sequence[ToolDescriptor]) -> str:
    """Format descriptors as ``name: description`` lines for prompts."""
    return "\n".join(f"{d.name}: {d.description}" for d in descriptors)


def snapshot(descriptors: Sequence[ToolDescriptor]) -> dict[str, ToolDescriptor]:
    """Map tool names to descriptors; the first registered name wins."""
    by_name: dict[str, ToolDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in by_name:
            logger.debug(
                "Tool '%s' from '%s' shadowed by provider '%s'",
                descriptor.name,
                descriptor.provider,
                by_name[descriptor.name].provider,
            )
            continue
        by_name[descriptor.name] = descriptor
    return by_name


class ToolCatalog:
    """Aggregates the tools of all registered providers."""

    def __init__(self, providers: Optional[Sequence] = None):
        self._providers = list(providers or [])

    def list_all(self) -> list[ToolDescriptor]:
        """
        List tools from every provider, in registration order.

        A provider that fails to list its tools contributes none; the
        failure is logged and never propagated.
        """
        tools: list[ToolDescriptor] = []
        for provider in self._providers:
            try:
                listed = list(provider.list_tools() or [])
            except Exception as e:
                logger.warning("Error getting tools from %s: %s", provider.name, e)
                continue
            for item in listed:
                descriptor = self._normalize(item, provider.name)
                if descriptor is not None:
                    tools.append(descriptor)

        if not tools:
            logger.info("No provider tools available")
        return tools

    @staticmethod
    def _normalize(item: Any, provider_name: str) -> Optional[ToolDescriptor]:
        """Accept descriptors or raw metadata; stamp the origin provider."""
        if isinstance(item, ToolDescriptor):
            if item.provider:
                return item
            return replace(item, provider=provider_name)
        try:
            return normalize_tool(item, provider_name)
        except (ValueError, AttributeError, TypeError) as e:
            logger.warning("Ignoring malformed tool from %s: %s", provider_name, e)
            return None
