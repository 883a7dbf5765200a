"""Local ``$ref`` resolution for schema documents."""

import copy
from typing import Any
from urllib.parse import unquote

from structured_llm.exceptions import SchemaException

DEFINITION_KEYS = ("$defs", "definitions")


def dereference_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Inline every local ``$ref`` in a schema document.

    A flat table of the document's definitions is built first, then each
    ``$ref`` node is replaced with a copy of its target. Keys written next to
    a ``$ref`` (a ``description``, for example) override the target's keys.
    Definition tables are dropped from the returned tree.

    Args:
        schema: Raw schema document. It is not modified.

    Returns:
        A new schema tree with no ``$ref`` nodes.

    Raises:
        SchemaException: If a reference is not local, cannot be resolved,
            or is part of a reference cycle.
    """
    definitions = _collect_definitions(schema)
    resolved = _resolve(schema, schema, definitions, ())
    if isinstance(resolved, dict):
        for key in DEFINITION_KEYS:
            resolved.pop(key, None)
    return resolved


def _collect_definitions(schema: dict[str, Any]) -> dict[str, Any]:
    table: dict[str, Any] = {}
    for key in DEFINITION_KEYS:
        section = schema.get(key)
        if isinstance(section, dict):
            for name, definition in section.items():
                table[f"#/{key}/{_escape(name)}"] = definition
    return table


def _resolve(
    node: Any,
    root: dict[str, Any],
    definitions: dict[str, Any],
    stack: tuple[str, ...],
) -> Any:
    if isinstance(node, list):
        return [_resolve(item, root, definitions, stack) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in stack:
            chain = " -> ".join([*stack, ref])
            raise SchemaException(
                f"Circular $ref detected: {chain}", schema=root, reason="ref_cycle"
            )
        target = _lookup(ref, root, definitions)
        resolved_target = _resolve(target, root, definitions, (*stack, ref))
        siblings = {key: value for key, value in node.items() if key != "$ref"}
        if not siblings:
            return resolved_target
        if not isinstance(resolved_target, dict):
            raise SchemaException(
                f"$ref '{ref}' does not point to a schema object",
                schema=root,
                reason="ref_target",
            )
        merged = dict(resolved_target)
        merged.update(_resolve(siblings, root, definitions, stack))
        return merged

    return {
        key: value if key in DEFINITION_KEYS else _resolve(value, root, definitions, stack)
        for key, value in node.items()
    }


def _lookup(ref: str, root: dict[str, Any], definitions: dict[str, Any]) -> Any:
    if ref in definitions:
        return copy.deepcopy(definitions[ref])
    if ref == "#":
        return copy.deepcopy(root)
    if not ref.startswith("#/"):
        raise SchemaException(
            f"Only local references are supported, got '{ref}'",
            schema=root,
            reason="ref_remote",
        )

    current: Any = root
    for token in ref[2:].split("/"):
        token = _unescape(unquote(token))
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            raise SchemaException(
                f"Unresolvable $ref '{ref}'", schema=root, reason="ref_missing"
            )
    return copy.deepcopy(current)


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")
