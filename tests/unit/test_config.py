"""Unit tests for configuration utilities."""

from typing import Any
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from structured_llm.exceptions import ConfigurationException
from structured_llm.extraction.models import ProviderIdentity
from structured_llm.extraction.orchestrator import StructuredExtractor
from structured_llm.utils.config import (
    ExtractorConfig,
    create_extractor,
    load_config_from_environment,
    load_environment,
    resolve_provider,
)


def _getenv_from(env: dict[str, str]) -> Any:
    def fake_getenv(key: str, default: str | None = None) -> str | None:
        return env.get(key, default)

    return fake_getenv


class TestExtractorConfig:
    """Test the ExtractorConfig model."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Test default configuration values."""
        config = ExtractorConfig()

        assert config.default_provider is None
        assert config.require_explicit_provider is False
        assert config.max_attempts == 1
        assert config.feedback_window == 2
        assert config.request_timeout == 60.0

    @pytest.mark.unit
    def test_max_attempts_must_be_positive(self) -> None:
        """Test zero attempts is rejected."""
        with pytest.raises(ValidationError):
            ExtractorConfig(max_attempts=0)

    @pytest.mark.unit
    def test_backoff_bounds(self) -> None:
        """Test the backoff cap cannot be below the initial delay."""
        with pytest.raises(ValidationError):
            ExtractorConfig(retry_backoff_initial=5.0, retry_backoff_max=1.0)

    @pytest.mark.unit
    def test_provider_key_hidden_from_repr(self, openai_provider: ProviderIdentity) -> None:
        """Test credentials do not leak into logs."""
        config = ExtractorConfig(default_provider=openai_provider)

        assert openai_provider.key not in repr(config)


class TestConfigurationUtils:
    """Test configuration utility functions."""

    @pytest.mark.unit
    @patch("structured_llm.utils.config.load_dotenv")
    def test_load_environment(self, mock_load_dotenv: Any) -> None:
        """Test loading environment variables."""
        load_environment()
        mock_load_dotenv.assert_called_once()

    @pytest.mark.unit
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_load_config_with_default_provider(
        self, mock_load_dotenv: Any, mock_getenv: Any
    ) -> None:
        """Test a complete default provider is read from the environment."""
        mock_getenv.side_effect = _getenv_from(
            {
                "DEFAULT_PROVIDER_URL": "https://api.openai.com/v1",
                "DEFAULT_PROVIDER_KEY": "env-key",
                "DEFAULT_PROVIDER_MODEL": "gpt-4o-mini",
                "STRUCTURED_LLM_MAX_ATTEMPTS": "3",
            }
        )

        config = load_config_from_environment()

        assert config.default_provider == ProviderIdentity(
            url="https://api.openai.com/v1", key="env-key", model="gpt-4o-mini"
        )
        assert config.max_attempts == 3
        assert config.require_explicit_provider is False
        mock_load_dotenv.assert_called_once()

    @pytest.mark.unit
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_load_config_without_provider(
        self, mock_load_dotenv: Any, mock_getenv: Any
    ) -> None:
        """Test an empty environment yields no default provider."""
        mock_getenv.side_effect = _getenv_from({})

        config = load_config_from_environment()

        assert config.default_provider is None
        assert config.max_attempts == 1

    @pytest.mark.unit
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_partial_provider_raises_error(
        self, mock_load_dotenv: Any, mock_getenv: Any
    ) -> None:
        """Test provider variables must be set together."""
        mock_getenv.side_effect = _getenv_from(
            {
                "DEFAULT_PROVIDER_URL": "https://api.openai.com/v1",
                "DEFAULT_PROVIDER_MODEL": "gpt-4o-mini",
            }
        )

        with pytest.raises(ConfigurationException) as exc_info:
            load_config_from_environment()

        assert exc_info.value.config_key == "DEFAULT_PROVIDER_KEY"

    @pytest.mark.unit
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_require_explicit_provider_flag(
        self, mock_load_dotenv: Any, mock_getenv: Any
    ) -> None:
        """Test the explicit-provider switch is parsed."""
        mock_getenv.side_effect = _getenv_from({"REQUIRE_EXPLICIT_PROVIDER": "True"})

        config = load_config_from_environment()

        assert config.require_explicit_provider is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["zero", "0", "-2"])
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_invalid_max_attempts(
        self, mock_load_dotenv: Any, mock_getenv: Any, value: str
    ) -> None:
        """Test bad attempt budgets are rejected."""
        mock_getenv.side_effect = _getenv_from({"STRUCTURED_LLM_MAX_ATTEMPTS": value})

        with pytest.raises(ConfigurationException) as exc_info:
            load_config_from_environment()

        assert exc_info.value.config_key == "STRUCTURED_LLM_MAX_ATTEMPTS"
        assert exc_info.value.config_value == value

    @pytest.mark.unit
    def test_create_extractor_with_explicit_config(self) -> None:
        """Test creating an extractor from an explicit config."""
        config = ExtractorConfig(max_attempts=2)

        extractor = create_extractor(config)

        assert isinstance(extractor, StructuredExtractor)
        assert extractor.config is config

    @pytest.mark.unit
    @patch("structured_llm.utils.config.os.getenv")
    @patch("structured_llm.utils.config.load_dotenv")
    def test_create_extractor_from_environment(
        self, mock_load_dotenv: Any, mock_getenv: Any
    ) -> None:
        """Test creating an extractor from the environment."""
        mock_getenv.side_effect = _getenv_from({"STRUCTURED_LLM_MAX_ATTEMPTS": "4"})

        extractor = create_extractor()

        assert extractor.config.max_attempts == 4


class TestResolveProvider:
    """Test provider resolution for a request."""

    @pytest.mark.unit
    def test_request_provider_wins(
        self, openai_provider: ProviderIdentity, anthropic_provider: ProviderIdentity
    ) -> None:
        """Test an explicit provider overrides the default."""
        config = ExtractorConfig(default_provider=openai_provider)

        assert resolve_provider(config, anthropic_provider) is anthropic_provider

    @pytest.mark.unit
    def test_default_provider_used(self, openai_provider: ProviderIdentity) -> None:
        """Test the default applies when the request names none."""
        config = ExtractorConfig(default_provider=openai_provider)

        assert resolve_provider(config, None) == openai_provider

    @pytest.mark.unit
    def test_no_provider_available(self) -> None:
        """Test a missing provider with no default raises."""
        with pytest.raises(ConfigurationException) as exc_info:
            resolve_provider(ExtractorConfig(), None)

        assert exc_info.value.config_key == "default_provider"

    @pytest.mark.unit
    def test_explicit_provider_required(self, openai_provider: ProviderIdentity) -> None:
        """Test the default is ignored when providers must be explicit."""
        config = ExtractorConfig(
            default_provider=openai_provider, require_explicit_provider=True
        )

        with pytest.raises(ConfigurationException):
            resolve_provider(config, None)

    @pytest.mark.unit
    def test_blank_provider_field(self) -> None:
        """Test blank identity fields are rejected."""
        provider = ProviderIdentity(url="https://api.openai.com/v1", key=" ", model="m")

        with pytest.raises(ConfigurationException) as exc_info:
            resolve_provider(ExtractorConfig(), provider)

        assert "key" in str(exc_info.value)

    @pytest.mark.unit
    def test_callable_provider_passes_through(self) -> None:
        """Test custom callbacks are returned as-is."""

        def my_provider(request: Any, prompt: str, history: list[Any]) -> str:
            return "{}"

        assert resolve_provider(ExtractorConfig(), my_provider) is my_provider
