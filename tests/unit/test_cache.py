"""Unit tests for cache key and TTL helpers."""

from typing import Any

import pytest

from structured_llm.exceptions import CacheTTLException
from structured_llm.extraction.models import ProviderIdentity
from structured_llm.utils.cache import (
    MAX_CACHE_TTL_SECONDS,
    fingerprint,
    should_cache,
    validate_cache_ttl,
)


@pytest.mark.unit
class TestFingerprint:
    """Test cases for fingerprint."""

    def test_stable_across_key_order(
        self, sky_schema: dict[str, Any], openai_provider: ProviderIdentity
    ) -> None:
        """Test schema key order does not change the digest."""
        reordered = {"properties": sky_schema["properties"], "type": "object"}

        assert fingerprint("text", sky_schema, openai_provider) == fingerprint(
            "text", reordered, openai_provider
        )

    def test_changes_with_input_schema_and_provider(
        self,
        sky_schema: dict[str, Any],
        person_schema: dict[str, Any],
        openai_provider: ProviderIdentity,
        anthropic_provider: ProviderIdentity,
    ) -> None:
        """Test every request component contributes to the digest."""
        base = fingerprint("text", sky_schema, openai_provider)

        assert fingerprint("other", sky_schema, openai_provider) != base
        assert fingerprint("text", person_schema, openai_provider) != base
        assert fingerprint("text", sky_schema, anthropic_provider) != base

    def test_caller_key_scoped_to_credential(
        self, sky_schema: dict[str, Any], openai_provider: ProviderIdentity
    ) -> None:
        """Test caller keys ignore input but not the credential."""
        other_key = ProviderIdentity(
            url=openai_provider.url, key="another-key", model=openai_provider.model
        )

        first = fingerprint("a", sky_schema, openai_provider, cache_key="k1")
        second = fingerprint("b", {"type": "object"}, openai_provider, cache_key="k1")

        assert first == second
        assert fingerprint("a", sky_schema, other_key, cache_key="k1") != first

    def test_hex_digest(self, sky_schema: dict[str, Any]) -> None:
        """Test digests are sha256 hex strings."""
        digest = fingerprint("text", sky_schema, None)

        assert len(digest) == 64
        int(digest, 16)


@pytest.mark.unit
class TestCacheTTL:
    """Test cases for TTL validation."""

    @pytest.mark.parametrize("ttl", [0, 60, MAX_CACHE_TTL_SECONDS])
    def test_valid_ttls(self, ttl: int) -> None:
        """Test the accepted range is inclusive."""
        assert validate_cache_ttl(ttl) == ttl

    @pytest.mark.parametrize("ttl", [-1, MAX_CACHE_TTL_SECONDS + 1, 1.5, "60", True, None])
    def test_invalid_ttls(self, ttl: Any) -> None:
        """Test out-of-range and non-integer TTLs raise."""
        with pytest.raises(CacheTTLException) as exc_info:
            validate_cache_ttl(ttl)

        assert exc_info.value.ttl == ttl

    def test_should_cache(self) -> None:
        """Test a zero TTL disables caching."""
        assert should_cache(0) is False
        assert should_cache(3600) is True
        assert MAX_CACHE_TTL_SECONDS == 604800
