"""Shared pytest configuration and fixtures for the test suite."""

import os
from typing import Any
from unittest.mock import Mock

import pytest

from structured_llm.extraction.models import ProviderIdentity


@pytest.fixture
def mock_api_response() -> Mock:
    """Mock LiteLLM completion response."""
    mock_response = Mock()
    mock_response.choices = [Mock()]
    mock_response.choices[0].message.content = '{"skyColor": "lightBlue"}'
    return mock_response


@pytest.fixture
def sample_api_key() -> str:
    """Sample API key for testing."""
    return "test-api-key-12345"


@pytest.fixture
def openai_provider(sample_api_key: str) -> ProviderIdentity:
    """OpenAI-compatible provider identity."""
    return ProviderIdentity(
        url="https://api.openai.com/v1", key=sample_api_key, model="gpt-4o-mini"
    )


@pytest.fixture
def anthropic_provider(sample_api_key: str) -> ProviderIdentity:
    """Anthropic provider identity."""
    return ProviderIdentity(
        url="https://api.anthropic.com/v1/messages",
        key=sample_api_key,
        model="claude-3-haiku-20240307",
    )


@pytest.fixture
def google_provider(sample_api_key: str) -> ProviderIdentity:
    """Google provider identity."""
    return ProviderIdentity(
        url="https://generativelanguage.googleapis.com",
        key=sample_api_key,
        model="gemini-1.5-flash",
    )


@pytest.fixture
def sky_schema() -> dict[str, Any]:
    """Single-enum object schema used across pipeline tests."""
    return {
        "type": "object",
        "properties": {
            "skyColor": {"type": "string", "enum": ["lightBlue", "gray", "black"]}
        },
    }


@pytest.fixture
def person_schema() -> dict[str, Any]:
    """Object schema with required fields and a nested array."""
    return {
        "type": "object",
        "description": "A person mentioned in the text",
        "properties": {
            "name": {"type": "string", "description": "Full name"},
            "age": {"type": "integer"},
            "hobbies": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["name", "age"],
    }


class SecureTestConfig:
    """Test configuration that doesn't expose API keys in repr."""

    def __init__(
        self,
        openai_key: str | None,
        anthropic_key: str | None,
        google_key: str | None,
    ) -> None:
        self._openai_key = openai_key
        self._anthropic_key = anthropic_key
        self._google_key = google_key

    def __getitem__(self, key: str) -> Any:
        if key == "openai_api_key":
            return self._openai_key
        elif key == "anthropic_api_key":
            return self._anthropic_key
        elif key == "google_api_key":
            return self._google_key
        else:
            raise KeyError(key)

    def __repr__(self) -> str:
        return "SecureTestConfig(keys_available=True)"


@pytest.fixture
def integration_test_setup() -> SecureTestConfig:
    """Setup fixture for integration tests - skips without real API keys."""
    openai_key = os.getenv("OPENAI_API_KEY")
    anthropic_key = os.getenv("ANTHROPIC_API_KEY")
    google_key = os.getenv("GEMINI_API_KEY")

    if not (openai_key or anthropic_key or google_key):
        pytest.skip(
            "Integration tests require real API keys. Set OPENAI_API_KEY, "
            "ANTHROPIC_API_KEY or GEMINI_API_KEY environment variables."
        )

    return SecureTestConfig(
        openai_key=openai_key, anthropic_key=anthropic_key, google_key=google_key
    )

