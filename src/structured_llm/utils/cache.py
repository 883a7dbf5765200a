"""Helpers for callers that cache extraction results in an external store."""

import hashlib
import json
from typing import Any

from structured_llm.exceptions import CacheTTLException
from structured_llm.extraction.models import ProviderFunc, ProviderIdentity

MAX_CACHE_TTL_SECONDS = 7 * 24 * 60 * 60


def fingerprint(
    input_data: str,
    schema: dict[str, Any] | str,
    provider: ProviderIdentity | ProviderFunc | None,
    cache_key: str | None = None,
) -> str:
    """Compute a stable cache key for an extraction request.

    Args:
        input_data: Request input (text or base64)
        schema: Schema document or schema name
        provider: Provider identity or custom callback
        cache_key: Caller-chosen key; when given it replaces input and
            schema in the digest, scoped to the provider credential

    Returns:
        Hex SHA-256 digest
    """
    digest = hashlib.sha256()

    if cache_key is not None:
        digest.update(cache_key.encode("utf-8"))
        digest.update(_provider_key(provider).encode("utf-8"))
        return digest.hexdigest()

    serialized_schema = (
        schema
        if isinstance(schema, str)
        else json.dumps(schema, sort_keys=True, separators=(",", ":"))
    )
    digest.update(input_data.encode("utf-8"))
    digest.update(serialized_schema.encode("utf-8"))
    for part in _provider_parts(provider):
        digest.update(part.encode("utf-8"))
    return digest.hexdigest()


def validate_cache_ttl(ttl: Any) -> int:
    """Validate a cache TTL in seconds.

    Args:
        ttl: TTL supplied by the caller

    Returns:
        The TTL as an int, in ``[0, 7 days]``

    Raises:
        CacheTTLException: If the TTL is not an integer or out of range
    """
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        raise CacheTTLException(f"Cache TTL must be an integer, got {ttl!r}", ttl=ttl)

    if ttl < 0 or ttl > MAX_CACHE_TTL_SECONDS:
        raise CacheTTLException(
            f"Cache TTL must be between 0 and {MAX_CACHE_TTL_SECONDS} seconds",
            ttl=ttl,
        )

    return ttl


def should_cache(ttl: Any) -> bool:
    """Whether a result should be written for this TTL (0 disables caching)."""
    return validate_cache_ttl(ttl) > 0


def _provider_key(provider: ProviderIdentity | ProviderFunc | None) -> str:
    if isinstance(provider, ProviderIdentity):
        return provider.key
    return ""


def _provider_parts(provider: ProviderIdentity | ProviderFunc | None) -> list[str]:
    if provider is None:
        return []
    if isinstance(provider, ProviderIdentity):
        return [provider.url, provider.model, provider.key]
    return [f"{getattr(provider, '__module__', '')}.{getattr(provider, '__qualname__', '')}"]
