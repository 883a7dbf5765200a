"""Custom exceptions for the structured LLM extraction pipeline."""

from typing import Any


class StructuredLLMException(Exception):
    """Base exception for structured LLM extraction.

    All custom exceptions in this package should inherit from this base class.
    """

    pass


class SchemaException(StructuredLLMException):
    """Raised when a schema cannot be used for extraction.

    This exception is raised when:
    - The schema is not a valid JSON Schema document
    - The schema does not declare an object with properties at the top level
    - The schema uses a disallowed keyword (minLength, pattern, anyOf, ...)
    - A ``$ref`` cannot be resolved or forms a cycle

    No provider call is made once this exception is raised.

    Attributes:
        schema: The schema (or schema name) that was rejected
        reason: Short machine-friendly reason for the rejection
    """

    def __init__(
        self,
        message: str,
        schema: dict[str, Any] | str | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.schema = schema
        self.reason = reason


class SchemaNotFoundException(SchemaException):
    """Raised when a named schema cannot be found in any configured source."""

    pass


class UnsupportedSchemaTypeException(SchemaException):
    """Raised by the strict compiler when a node has an unsupported type."""

    pass


class InputTypeException(StructuredLLMException):
    """Raised when the resolved media type of the input is not supported.

    Attributes:
        media_type: The rejected media type
    """

    def __init__(self, message: str, media_type: str | None = None):
        super().__init__(message)
        self.media_type = media_type


class ProviderException(StructuredLLMException):
    """Raised when the LLM provider call fails.

    This exception is raised when:
    - API authentication fails
    - Rate limits are exceeded
    - The network call fails or times out
    - The provider reports an error body

    The provider's status code and message are forwarded verbatim so callers
    can tell a bad credential apart from a model that answered incorrectly.
    These errors are never retried by the extraction loop.

    Attributes:
        status_code: HTTP status code reported by the provider, if any
        provider: The provider family that caused the error
        model: The model that was being used
        original_error: The original exception from the provider
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        provider: str | None = None,
        model: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider = provider
        self.model = model
        self.original_error = original_error


class ProviderResponseException(ProviderException):
    """Raised when a provider reply carries no usable text."""

    pass


class ConfigurationException(StructuredLLMException):
    """Raised when configuration errors occur.

    This exception is raised when:
    - No provider was given and no default provider is configured
    - A provider is required explicitly but was not supplied
    - Provider settings are only partially supplied
    - Invalid configuration values are provided

    Attributes:
        config_key: The configuration key that caused the error
        config_value: The invalid configuration value
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        config_value: str | None = None,
    ):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value


class CacheTTLException(StructuredLLMException):
    """Raised when a cache TTL falls outside the accepted range.

    Attributes:
        ttl: The rejected TTL value
    """

    def __init__(self, message: str, ttl: Any = None):
        super().__init__(message)
        self.ttl = ttl
