"""Structured LLM - schema-guided extraction of JSON from text and images."""

__version__ = "0.1.0"

# Records, parsing and prompts
from .extraction import (
    Attempt,
    ExtractionRequest,
    ExtractionResult,
    ExtractionStatus,
    ProviderFamily,
    ProviderIdentity,
    parse_json_substring,
)

# Orchestrator
from .extraction.orchestrator import ExtractionState, StructuredExtractor

# Custom exceptions
from .exceptions import (
    CacheTTLException,
    ConfigurationException,
    InputTypeException,
    ProviderException,
    ProviderResponseException,
    SchemaException,
    SchemaNotFoundException,
    StructuredLLMException,
    UnsupportedSchemaTypeException,
)

# Input checks
from .files import SUPPORTED_MEDIA_TYPES, check_media_type

# Provider adapters
from .providers import (
    AnthropicAdapter,
    BaseProviderAdapter,
    CustomFunctionAdapter,
    GoogleAdapter,
    OpenAICompatibleAdapter,
    ProviderAdapterFactory,
)

# Schema handling
from .schema import (
    CompiledPrompt,
    ResultValidator,
    SchemaManager,
    ValidationIssue,
    check_schema,
    compile_schema,
    dereference_schema,
)

# Configuration and cache utilities
from .utils import (
    ExtractorConfig,
    create_extractor,
    fingerprint,
    load_config_from_environment,
    load_environment,
    validate_cache_ttl,
)

__all__ = [
    "__version__",
    "StructuredExtractor",
    "ExtractionState",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionStatus",
    "Attempt",
    "ProviderFamily",
    "ProviderIdentity",
    "parse_json_substring",
    "BaseProviderAdapter",
    "OpenAICompatibleAdapter",
    "AnthropicAdapter",
    "GoogleAdapter",
    "CustomFunctionAdapter",
    "ProviderAdapterFactory",
    "CompiledPrompt",
    "ResultValidator",
    "SchemaManager",
    "ValidationIssue",
    "check_schema",
    "compile_schema",
    "dereference_schema",
    "SUPPORTED_MEDIA_TYPES",
    "check_media_type",
    "ExtractorConfig",
    "create_extractor",
    "fingerprint",
    "load_config_from_environment",
    "load_environment",
    "validate_cache_ttl",
    # Exceptions
    "StructuredLLMException",
    "SchemaException",
    "SchemaNotFoundException",
    "UnsupportedSchemaTypeException",
    "InputTypeException",
    "ProviderException",
    "ProviderResponseException",
    "ConfigurationException",
    "CacheTTLException",
]
