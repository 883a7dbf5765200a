"""Utility functions for configuration and cache keys."""

from .cache import fingerprint, should_cache, validate_cache_ttl
from .config import (
    ExtractorConfig,
    create_extractor,
    load_config_from_environment,
    load_environment,
    resolve_provider,
)

__all__ = [
    "ExtractorConfig",
    "load_environment",
    "load_config_from_environment",
    "create_extractor",
    "resolve_provider",
    "fingerprint",
    "should_cache",
    "validate_cache_ttl",
]
