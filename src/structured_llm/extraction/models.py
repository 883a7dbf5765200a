"""Request, attempt and result records for structured extraction."""

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from structured_llm.schema.compiler import CompiledPrompt
from structured_llm.schema.validators import ValidationIssue


class ProviderFamily(Enum):
    """Wire-protocol variants a provider adapter can implement."""

    OPENAI_COMPATIBLE = "openai-compatible"
    ANTHROPIC_LIKE = "anthropic-like"
    GOOGLE_LIKE = "google-like"
    CUSTOM_FUNCTION = "custom-function"


class ExtractionStatus(Enum):
    """Terminal status of an extraction request."""

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class ProviderIdentity(BaseModel):
    """Endpoint, credential and model of the provider serving a request.

    The credential is kept out of ``repr`` so identities can be logged.

    Attributes:
        url: Provider endpoint (base URL)
        key: Provider credential
        model: Model name as the provider knows it
    """

    model_config = ConfigDict(frozen=True)

    url: str
    key: str = Field(repr=False)
    model: str


# Custom provider callback: (request, prompt, previous attempts) -> raw text.
# Coroutine functions are accepted as well.
ProviderFunc = Callable[..., Any]


class Attempt(BaseModel):
    """One provider round-trip plus its parse and validation outcome.

    Attributes:
        number: 1-based attempt number within the request
        raw: The provider's unparsed reply
        structured: Parsed JSON value, or None if nothing parsed
        valid: Whether ``structured`` conforms to the schema
        errors: Validation errors, ordered by path
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    raw: str
    structured: Any = None
    valid: bool
    errors: tuple[ValidationIssue, ...] = ()


class ExtractionResult(BaseModel):
    """Terminal value of an extraction request.

    An exhausted result still carries the last raw text, the best-effort
    value and its validation errors so callers can inspect what went wrong.
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    structured: Any = None
    valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    attempts_used: int = Field(ge=1)
    status: ExtractionStatus

    @classmethod
    def from_attempt(cls, attempt: Attempt) -> "ExtractionResult":
        """Build the terminal result from the final attempt."""
        return cls(
            raw=attempt.raw,
            structured=attempt.structured,
            valid=attempt.valid,
            errors=attempt.errors,
            attempts_used=attempt.number,
            status=(
                ExtractionStatus.SUCCEEDED
                if attempt.valid
                else ExtractionStatus.EXHAUSTED
            ),
        )


class ExtractionRequest(BaseModel):
    """Input boundary of the extraction pipeline.

    Attributes:
        input: Plain text, or base64-encoded bytes for image input
        type: Resolved media type; None means plain text
        schema_: Raw schema document or a schema name (field alias ``schema``)
        instruction: Optional extra instruction for the model
        provider: Provider identity or custom callback; None uses the
            configured default provider
        max_attempts: Attempt budget; None uses the configured default
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input: str
    type: str | None = None
    schema_: dict[str, Any] | str = Field(alias="schema")
    instruction: str | None = None
    provider: ProviderIdentity | ProviderFunc | None = None
    max_attempts: int | None = Field(default=None, ge=1)

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        # Drop parameters such as "; charset=utf-8"
        return value.split(";", 1)[0].strip().lower() or None

    @property
    def is_image(self) -> bool:
        """Whether the input is base64 image data."""
        return bool(self.type and self.type.startswith("image/"))


__all__ = [
    "Attempt",
    "CompiledPrompt",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionStatus",
    "ProviderFamily",
    "ProviderFunc",
    "ProviderIdentity",
    "ValidationIssue",
]
