"""Validation of extracted values against the request schema."""

import time
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.validators import validator_for
from pydantic import BaseModel, ConfigDict

NO_JSON_MESSAGE = "No JSON object could be extracted from the response"
ROOT_PATH = "$"


class ValidationIssue(BaseModel):
    """A single validation error located by its JSON path."""

    model_config = ConfigDict(frozen=True)

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationOutcome(BaseModel):
    """Result of validating one extracted value.

    Attributes:
        valid: Whether the value conforms to the schema
        errors: Validation errors ordered by path
        validation_time_ms: Time taken for validation in milliseconds
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    validation_time_ms: float = 0


class ResultValidator:
    """Validates extracted JSON values against a dereferenced schema.

    Type checks, object shape checks and enum membership are all delegated to
    ``jsonschema``. The validator class follows the schema's ``$schema`` and
    defaults to Draft 7.
    """

    def validate(self, schema: dict[str, Any], value: Any) -> ValidationOutcome:
        """Validate a value against a schema.

        Args:
            schema: Dereferenced schema tree
            value: Extracted value, or None when nothing could be extracted

        Returns:
            ValidationOutcome with ordered errors
        """
        start_time = time.time()

        if value is None:
            return ValidationOutcome(
                valid=False,
                errors=(ValidationIssue(path=ROOT_PATH, message=NO_JSON_MESSAGE),),
                validation_time_ms=(time.time() - start_time) * 1000,
            )

        validator_class = validator_for(schema, default=Draft7Validator)
        validator = validator_class(schema)

        errors = sorted(
            validator.iter_errors(value),
            key=lambda error: [str(part) for part in error.absolute_path],
        )
        issues = tuple(
            ValidationIssue(path=format_path(error.absolute_path), message=error.message)
            for error in errors
        )

        return ValidationOutcome(
            valid=not issues,
            errors=issues,
            validation_time_ms=(time.time() - start_time) * 1000,
        )


def format_path(parts: Any) -> str:
    """Join a jsonschema error path into a ``.``-separated string."""
    joined = ".".join(str(part) for part in parts)
    return joined or ROOT_PATH


def format_validation_errors(errors: tuple[ValidationIssue, ...] | list[ValidationIssue]) -> str:
    """Serialize validation errors for a feedback turn."""
    return "; ".join(str(error) for error in errors)
