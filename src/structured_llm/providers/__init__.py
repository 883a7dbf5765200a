"""Provider adapters for OpenAI-compatible, Anthropic, Google and custom providers."""

from .adapters import (
    AnthropicAdapter,
    BaseProviderAdapter,
    CustomFunctionAdapter,
    GoogleAdapter,
    OpenAICompatibleAdapter,
    ProviderAdapterFactory,
)

__all__ = [
    "BaseProviderAdapter",
    "OpenAICompatibleAdapter",
    "AnthropicAdapter",
    "GoogleAdapter",
    "CustomFunctionAdapter",
    "ProviderAdapterFactory",
]
