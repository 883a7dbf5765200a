"""Schema screening: well-formedness and the supported keyword subset."""

from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from structured_llm.exceptions import SchemaException

DISALLOWED_KEYWORDS = (
    "minLength",
    "minimum",
    "maxLength",
    "maximum",
    "oneOf",
    "anyOf",
    "allOf",
    "pattern",
)

INVALID_SCHEMA_MESSAGE = "Provided JSON schema is invalid"


def check_schema(schema: Any) -> str | None:
    """Check that a schema can be handed to the compiler.

    The well-formedness check runs first: the document must pass the JSON
    Schema meta-schema and declare an object with at least one property at
    the top level. Only then is the tree walked for disallowed keywords.

    Args:
        schema: Raw schema document, before dereferencing.

    Returns:
        An error message, or None if the schema is acceptable.
    """
    if not is_well_formed(schema):
        return INVALID_SCHEMA_MESSAGE

    keyword = find_disallowed_keyword(schema)
    if keyword is not None:
        return f"Disallowed property '{keyword}' found in schema"

    return None


def ensure_valid_schema(schema: Any) -> None:
    """Raise SchemaException if ``check_schema`` reports a problem."""
    error = check_schema(schema)
    if error is not None:
        reason = "invalid" if error == INVALID_SCHEMA_MESSAGE else "disallowed_keyword"
        raise SchemaException(error, schema=schema, reason=reason)


def is_well_formed(schema: Any) -> bool:
    """Return True for a valid schema document with a top-level object."""
    if not isinstance(schema, dict):
        return False

    try:
        validator_for(schema, default=Draft7Validator).check_schema(schema)
    except SchemaError:
        return False

    properties = schema.get("properties")
    return (
        schema.get("type") == "object"
        and isinstance(properties, dict)
        and len(properties) > 0
    )


def find_disallowed_keyword(schema: Any) -> str | None:
    """Find the first disallowed keyword, depth-first.

    Keys of a node are visited in declaration order. ``properties`` values,
    ``items`` and definition tables are descended into as they are met.

    Args:
        schema: Schema node to walk.

    Returns:
        The offending keyword, or None.
    """
    if not isinstance(schema, dict):
        return None

    for key, value in schema.items():
        if key in DISALLOWED_KEYWORDS:
            return key

        if key in ("properties", "$defs", "definitions") and isinstance(value, dict):
            for child in value.values():
                found = find_disallowed_keyword(child)
                if found:
                    return found

        if key == "items":
            children = value if isinstance(value, list) else [value]
            for child in children:
                found = find_disallowed_keyword(child)
                if found:
                    return found

    return None
