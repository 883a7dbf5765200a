"""Unit tests for ResultValidator."""

from typing import Any

import pytest

from structured_llm.schema.validators import (
    NO_JSON_MESSAGE,
    ResultValidator,
    ValidationIssue,
    format_path,
    format_validation_errors,
)


@pytest.mark.unit
class TestResultValidator:
    """Test cases for ResultValidator."""

    def test_valid_value(self, person_schema: dict[str, Any]) -> None:
        """Test a conforming value validates with no errors."""
        outcome = ResultValidator().validate(
            person_schema, {"name": "Ada", "age": 36, "hobbies": ["maths"]}
        )

        assert outcome.valid is True
        assert outcome.errors == ()
        assert outcome.validation_time_ms >= 0

    def test_missing_value_is_invalid(self, person_schema: dict[str, Any]) -> None:
        """Test a reply without JSON is reported at the root."""
        outcome = ResultValidator().validate(person_schema, None)

        assert outcome.valid is False
        assert outcome.errors == (ValidationIssue(path="$", message=NO_JSON_MESSAGE),)

    def test_enum_violation(self, sky_schema: dict[str, Any]) -> None:
        """Test enum membership is enforced."""
        outcome = ResultValidator().validate(sky_schema, {"skyColor": "purple"})

        assert outcome.valid is False
        assert len(outcome.errors) == 1
        assert outcome.errors[0].path == "skyColor"
        assert "purple" in outcome.errors[0].message

    def test_type_and_required_errors_are_ordered_by_path(
        self, person_schema: dict[str, Any]
    ) -> None:
        """Test multiple errors are collected and ordered."""
        outcome = ResultValidator().validate(
            person_schema, {"name": 7, "hobbies": ["a", 2]}
        )

        assert outcome.valid is False
        assert [error.path for error in outcome.errors] == ["$", "hobbies.1", "name"]
        assert "'age' is a required property" in outcome.errors[0].message

    def test_non_object_value(self, sky_schema: dict[str, Any]) -> None:
        """Test a value of the wrong top-level type is invalid."""
        outcome = ResultValidator().validate(sky_schema, ["lightBlue"])

        assert outcome.valid is False
        assert outcome.errors[0].path == "$"


@pytest.mark.unit
class TestErrorFormatting:
    """Test cases for error formatting helpers."""

    def test_format_path(self) -> None:
        """Test path joining and the root marker."""
        assert format_path([]) == "$"
        assert format_path(["items", 0, "price"]) == "items.0.price"

    def test_issue_str(self) -> None:
        """Test issue string form."""
        assert str(ValidationIssue(path="age", message="bad")) == "age: bad"

    def test_format_validation_errors(self) -> None:
        """Test errors are joined for feedback."""
        errors = [
            ValidationIssue(path="$", message="'age' is a required property"),
            ValidationIssue(path="name", message="7 is not of type 'string'"),
        ]

        assert format_validation_errors(errors) == (
            "$: 'age' is a required property; name: 7 is not of type 'string'"
        )
