"""Extractor configuration and environment-based setup."""

import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from structured_llm.exceptions import ConfigurationException
from structured_llm.extraction.models import ProviderIdentity

if TYPE_CHECKING:
    from structured_llm.extraction.orchestrator import StructuredExtractor

TRUE_VALUES = {"1", "true", "yes", "on"}


class ExtractorConfig(BaseModel):
    """Configuration passed explicitly to a StructuredExtractor.

    Attributes:
        default_provider: Provider used when a request names none
        require_explicit_provider: Reject requests without a provider even if
            a default is configured
        max_attempts: Attempt budget when a request leaves it unset
        feedback_window: How many recent failed attempts are fed back
        retry_backoff_initial: Delay in seconds before the first retry
        retry_backoff_max: Upper bound on the delay between attempts
        request_timeout: Timeout in seconds for each provider call
        strict_schema_types: Raise on unsupported schema types instead of
            rendering them as ``any``
    """

    model_config = ConfigDict(frozen=True)

    default_provider: ProviderIdentity | None = None
    require_explicit_provider: bool = False
    max_attempts: int = Field(default=1, ge=1)
    feedback_window: int = Field(default=2, ge=0)
    retry_backoff_initial: float = Field(default=0.5, ge=0)
    retry_backoff_max: float = Field(default=4.0, ge=0)
    request_timeout: float | None = Field(default=60.0, gt=0)
    strict_schema_types: bool = False

    @model_validator(mode="after")
    def _check_backoff(self) -> "ExtractorConfig":
        if self.retry_backoff_max < self.retry_backoff_initial:
            raise ValueError("retry_backoff_max must be >= retry_backoff_initial")
        return self


def load_environment() -> None:
    """Load environment variables from .env file if it exists."""
    load_dotenv()


def load_config_from_environment() -> ExtractorConfig:
    """Build an ExtractorConfig from environment variables.

    Reads ``DEFAULT_PROVIDER_URL``, ``DEFAULT_PROVIDER_KEY`` and
    ``DEFAULT_PROVIDER_MODEL`` (all three or none), plus
    ``REQUIRE_EXPLICIT_PROVIDER`` and ``STRUCTURED_LLM_MAX_ATTEMPTS``.

    Returns:
        Configured ExtractorConfig

    Raises:
        ConfigurationException: If provider settings are only partially set
            or a value cannot be parsed
    """
    load_environment()

    provider_settings = {
        "url": os.getenv("DEFAULT_PROVIDER_URL"),
        "key": os.getenv("DEFAULT_PROVIDER_KEY"),
        "model": os.getenv("DEFAULT_PROVIDER_MODEL"),
    }

    default_provider = None
    if any(provider_settings.values()):
        missing = [name for name, value in provider_settings.items() if not value]
        if missing:
            raise ConfigurationException(
                "If any DEFAULT_PROVIDER_* variable is set, all of them must be set",
                config_key=f"DEFAULT_PROVIDER_{missing[0].upper()}",
            )
        default_provider = ProviderIdentity(**provider_settings)  # type: ignore[arg-type]

    require_explicit = (
        os.getenv("REQUIRE_EXPLICIT_PROVIDER", "false").strip().lower() in TRUE_VALUES
    )

    max_attempts_value = os.getenv("STRUCTURED_LLM_MAX_ATTEMPTS", "1")
    try:
        max_attempts = int(max_attempts_value)
    except ValueError as e:
        raise ConfigurationException(
            "STRUCTURED_LLM_MAX_ATTEMPTS must be an integer",
            config_key="STRUCTURED_LLM_MAX_ATTEMPTS",
            config_value=max_attempts_value,
        ) from e

    if max_attempts < 1:
        raise ConfigurationException(
            "STRUCTURED_LLM_MAX_ATTEMPTS must be at least 1",
            config_key="STRUCTURED_LLM_MAX_ATTEMPTS",
            config_value=max_attempts_value,
        )

    return ExtractorConfig(
        default_provider=default_provider,
        require_explicit_provider=require_explicit,
        max_attempts=max_attempts,
    )


def create_extractor(config: ExtractorConfig | None = None) -> "StructuredExtractor":
    """Create a StructuredExtractor, reading the environment if no config is given.

    Args:
        config: Explicit configuration (if None, loads it from the environment)

    Returns:
        Configured StructuredExtractor
    """
    from structured_llm.extraction.orchestrator import StructuredExtractor

    if config is None:
        config = load_config_from_environment()

    return StructuredExtractor(config=config)


def resolve_provider(
    config: ExtractorConfig, provider: ProviderIdentity | object | None
) -> ProviderIdentity | object:
    """Pick the provider for a request.

    Args:
        config: Extractor configuration
        provider: Provider given by the request, if any

    Returns:
        The request's provider, or the configured default

    Raises:
        ConfigurationException: If no usable provider is available
    """
    if provider is None:
        if config.require_explicit_provider:
            raise ConfigurationException(
                "A provider must be supplied with each request",
                config_key="require_explicit_provider",
            )
        if config.default_provider is None:
            raise ConfigurationException(
                "No provider supplied and no default provider configured",
                config_key="default_provider",
            )
        provider = config.default_provider

    if isinstance(provider, ProviderIdentity):
        for field in ("url", "key", "model"):
            if not getattr(provider, field).strip():
                raise ConfigurationException(
                    f"Provider {field} must not be empty",
                    config_key=f"provider.{field}",
                )

    return provider
