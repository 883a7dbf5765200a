"""Compile a schema tree into the minimal shape string used in prompts.

The shape string is a compact TypeScript-like rendering of the schema, for
example ``{ name: string, tags: string[], status: 'open' | 'closed' }``.
It goes into the prompt verbatim, so the rendering must be stable.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from structured_llm.exceptions import UnsupportedSchemaTypeException

logger = logging.getLogger(__name__)

PRIMITIVE_SHAPES = {
    "string": "string",
    "number": "float",
    "integer": "float",
    "boolean": "boolean",
}


class CompiledPrompt(BaseModel):
    """Prompt-ready rendering of a schema, derived once per request.

    Attributes:
        shape: Minimal shape string for the whole schema
        descriptions: Ordered ``(json path, description)`` pairs
    """

    model_config = ConfigDict(frozen=True)

    shape: str
    descriptions: tuple[tuple[str, str], ...] = ()

    @property
    def descriptions_text(self) -> str:
        """Render descriptions as ``<path>: <text>`` lines."""
        return "".join(f"{path}: {text}\n" for path, text in self.descriptions)


def compile_schema(schema: dict[str, Any], strict: bool = False) -> CompiledPrompt:
    """Compile a dereferenced schema into a shape string and descriptions.

    Args:
        schema: Schema tree with no ``$ref`` nodes left
        strict: Raise on unsupported types instead of rendering ``any``

    Returns:
        CompiledPrompt reused across all attempts of a request
    """
    return CompiledPrompt(
        shape=minimal_schema(schema, strict=strict),
        descriptions=tuple(collect_descriptions(schema)),
    )


def minimal_schema(schema: dict[str, Any] | None, strict: bool = False) -> str:
    """Render one schema node as a shape string.

    Args:
        schema: Schema node
        strict: Raise UnsupportedSchemaTypeException for unknown types

    Returns:
        Shape string for the node
    """
    if not schema:
        return ""

    enum_values = schema.get("enum")
    if isinstance(enum_values, list):
        return " | ".join(_render_literal(value) for value in enum_values)

    schema_type = schema.get("type")

    if isinstance(schema_type, str) and schema_type in PRIMITIVE_SHAPES:
        return PRIMITIVE_SHAPES[schema_type]

    if schema_type == "array":
        item = _first_item(schema)
        if item is None:
            return "string[]"

        item_shape = minimal_schema(item, strict=strict)
        if item.get("type") == "object" and item.get("properties"):
            return f"[ {item_shape} ]"
        return f"{item_shape}[]"

    if schema_type == "object":
        properties = schema.get("properties")
        if not properties:
            return "{}"

        fields = ", ".join(
            f"{key}: {minimal_schema(value, strict=strict)}"
            for key, value in properties.items()
        )
        return f"{{ {fields} }}"

    if strict:
        raise UnsupportedSchemaTypeException(
            f"Unsupported schema type: {schema_type}",
            schema=schema,
            reason="unsupported_type",
        )

    logger.debug("Rendering unsupported schema type %r as 'any'", schema_type)
    return "any"


def collect_descriptions(
    schema: dict[str, Any] | None, path: str = ""
) -> list[tuple[str, str]]:
    """Collect ``(json path, description)`` pairs from a schema tree.

    Containers contribute their own description and their children are still
    visited. Property paths are ``.``-joined; array elements add ``[]``.
    """
    if not schema:
        return []

    descriptions: list[tuple[str, str]] = []

    if schema.get("description"):
        descriptions.append((path, str(schema["description"])))

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for key, prop in properties.items():
            if prop:
                descriptions.extend(collect_descriptions(prop, f"{path}.{key}"))

    if schema.get("type") == "array":
        item = _first_item(schema)
        if item:
            descriptions.extend(collect_descriptions(item, f"{path}[]"))

    return descriptions


def _first_item(schema: dict[str, Any]) -> dict[str, Any] | None:
    items = schema.get("items")
    if isinstance(items, list):
        items = items[0] if items else None
    return items if isinstance(items, dict) else None


def _render_literal(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # json.dumps gives true/false/null and bare numbers
    return json.dumps(value)
