"""
Validation of tool-call arguments against a tool's parameter schema.

A pydantic model is built from the descriptor's parameters so the model's
untyped argument mapping is checked (and lightly coerced, e.g. ``"5"`` to
``5`` for integers) before it reaches a provider.
"""

import logging
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from ..errors import ToolArgumentError
from ..models import ParameterSpec, ToolDescriptor

logger = logging.getLogger(__name__)

JSON_TYPES: dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "array": list,
    "object": dict,
}


def _annotation(spec: ParameterSpec) -> Any:
    if spec.enum:
        return Literal[spec.enum]
    return JSON_TYPES.get(spec.type, Any)


def build_arguments_model(descriptor: ToolDescriptor) -> type[BaseModel]:
    """Create a pydantic model that accepts exactly the tool's parameters."""
    fields: dict[str, Any] = {}
    # Parameter names are carried as aliases so names like "schema" or
    # "_private" cannot collide with pydantic internals.
    for index, (name, spec) in enumerate(descriptor.parameters.items()):
        annotation = _annotation(spec)
        if spec.required:
            fields[f"param_{index}"] = (annotation, Field(..., alias=name))
        else:
            fields[f"param_{index}"] = (
                Optional[annotation],
                Field(spec.default, alias=name),
            )

    return create_model(
        f"{descriptor.name}_arguments",
        __config__=ConfigDict(extra="forbid"),
        **fields,
    )


def validate_arguments(descriptor: ToolDescriptor, args: Mapping[str, Any]) -> dict:
    """
    Validate ``args`` against ``descriptor`` and return the checked mapping.

    Only the arguments the caller supplied are returned (coerced to their
    declared types); defaults are left for the provider to apply.

    Raises:
        ToolArgumentError: If any argument is missing, unknown or mistyped.
    """
    if not isinstance(args, Mapping):
        raise ToolArgumentError(descriptor.name, ["arguments must be an object"])

    model = build_arguments_model(descriptor)
    try:
        validated = model.model_validate(dict(args))
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        logger.debug("Argument validation failed for '%s': %s", descriptor.name, problems)
        raise ToolArgumentError(descriptor.name, problems) from e

    return validated.model_dump(by_alias=True, exclude_unset=True)
