"""Provider-specific adapters behind one extraction contract."""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlparse

import litellm

from structured_llm.exceptions import (
    ConfigurationException,
    ProviderException,
    ProviderResponseException,
)
from structured_llm.extraction.models import (
    Attempt,
    ExtractionRequest,
    ProviderFamily,
    ProviderFunc,
    ProviderIdentity,
)
from structured_llm.extraction.prompts import build_feedback_turns, build_request_text

logger = logging.getLogger(__name__)

GOOGLE_HOST = "generativelanguage.googleapis.com"
ANTHROPIC_HOST = "anthropic.com"
DEFAULT_TEMPERATURE = 0.2


class BaseProviderAdapter(ABC):
    """Base class for provider adapters.

    An adapter turns (request, prompt, history) into one native request,
    performs the network call and pulls the reply text back out. Provider
    failures surface as ProviderException with the provider's status code
    and message; they are never swallowed.
    """

    family: ProviderFamily

    def __init__(
        self, provider: ProviderIdentity, timeout: float | None = None
    ) -> None:
        """Initialize the adapter.

        Args:
            provider: Endpoint, credential and model to call
            timeout: Per-call timeout in seconds (None for no timeout)
        """
        self.provider = provider
        self.timeout = timeout

    @abstractmethod
    def build_request(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> dict[str, Any]:
        """Build the keyword arguments for one provider call.

        Args:
            request: The extraction request
            prompt: Compiled schema prompt
            history: Retained failed attempts, oldest first

        Returns:
            Request parameters in the provider's native layout
        """
        pass

    def extract_raw_text(self, response: Any) -> str:
        """Pull the reply text out of a provider response.

        Args:
            response: LiteLLM completion response

        Returns:
            Reply text

        Raises:
            ProviderResponseException: If the response carries no text
        """
        content = None
        if hasattr(response, "choices") and response.choices:
            message = getattr(response.choices[0], "message", None)
            content = getattr(message, "content", None)

        if isinstance(content, list):
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )

        if not content:
            raise ProviderResponseException(
                f"{self.family.value} provider returned invalid response",
                provider=self.family.value,
                model=self.provider.model,
            )

        return str(content)

    def complete(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> str:
        """Send one request to the provider and return its reply text."""
        kwargs = self.build_request(request, prompt, history)
        self._log_dispatch(history)

        try:
            response = litellm.completion(**kwargs)
        except Exception as e:
            raise self._provider_error(e) from e

        return self.extract_raw_text(response)

    async def acomplete(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> str:
        """Async variant of ``complete``; cancelling the caller cancels the call."""
        kwargs = self.build_request(request, prompt, history)
        self._log_dispatch(history)

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            raise self._provider_error(e) from e

        return self.extract_raw_text(response)

    def _base_request(
        self, model: str, messages: list[dict[str, Any]]
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "api_key": self.provider.key,
            "temperature": DEFAULT_TEMPERATURE,
        }
        if self.timeout is not None:
            params["timeout"] = self.timeout
        return params

    def _prefixed_model(self, prefix: str) -> str:
        model = self.provider.model
        return model if model.startswith(f"{prefix}/") else f"{prefix}/{model}"

    def _provider_error(self, error: Exception) -> ProviderException:
        if isinstance(error, ProviderException):
            return error

        message = getattr(error, "message", None) or str(error)
        return ProviderException(
            message,
            status_code=getattr(error, "status_code", None),
            provider=self.family.value,
            model=self.provider.model,
            original_error=error,
        )

    def _log_dispatch(self, history: Sequence[Attempt]) -> None:
        logger.debug(
            "Dispatching %s request to model %s with %d feedback turn(s)",
            self.family.value,
            self.provider.model,
            len(history),
        )


def data_url(request: ExtractionRequest) -> str:
    """Render base64 image input as a data URL."""
    return f"data:{request.type};base64,{request.input}"


class OpenAICompatibleAdapter(BaseProviderAdapter):
    """Adapter for OpenAI and OpenAI-compatible chat completion endpoints."""

    family = ProviderFamily.OPENAI_COMPATIBLE

    def build_request(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> dict[str, Any]:
        """Build a chat request; images go in a second content part."""
        messages: list[dict[str, Any]] = [
            {"role": "user", "content": build_request_text(request, prompt)}
        ]

        if request.is_image:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": data_url(request)}}
                    ],
                }
            )

        messages.extend(build_feedback_turns(history))

        params = self._base_request(self._prefixed_model("openai"), messages)
        params["api_base"] = self.provider.url
        return params


class AnthropicAdapter(BaseProviderAdapter):
    """Adapter for Anthropic-style message endpoints."""

    family = ProviderFamily.ANTHROPIC_LIKE
    max_tokens = 1024

    def build_request(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> dict[str, Any]:
        """Build a messages request with an inline base64 image block."""
        text = build_request_text(request, prompt)

        content: str | list[dict[str, Any]]
        if request.is_image:
            content = [
                {"type": "text", "text": text},
                {
                    "type": "image_url",
                    "image_url": {"url": data_url(request), "format": request.type},
                },
            ]
        else:
            content = text

        messages: list[dict[str, Any]] = [{"role": "user", "content": content}]
        messages.extend(build_feedback_turns(history))

        params = self._base_request(self._prefixed_model("anthropic"), messages)
        params["max_tokens"] = self.max_tokens
        return params


class GoogleAdapter(BaseProviderAdapter):
    """Adapter for Google generative language endpoints."""

    family = ProviderFamily.GOOGLE_LIKE

    def build_request(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> dict[str, Any]:
        """Build a multi-part request with image bytes as inline data."""
        parts: list[dict[str, Any]] = [
            {"type": "text", "text": build_request_text(request, prompt)}
        ]

        if request.is_image:
            parts.append(
                {
                    "type": "file",
                    "file": {"file_data": data_url(request), "format": request.type},
                }
            )

        messages: list[dict[str, Any]] = [{"role": "user", "content": parts}]
        messages.extend(build_feedback_turns(history))

        return self._base_request(self._prefixed_model("gemini"), messages)


class CustomFunctionAdapter(BaseProviderAdapter):
    """Adapter wrapping a caller-supplied provider callback.

    The callback receives ``(request, prompt, history)`` and returns the raw
    reply text. Coroutine functions are supported through ``acomplete``.
    """

    family = ProviderFamily.CUSTOM_FUNCTION

    def __init__(self, func: ProviderFunc, timeout: float | None = None) -> None:
        """Initialize with the callback to invoke for each attempt."""
        self.func = func
        self.timeout = timeout
        self.provider = ProviderIdentity(
            url="", key="", model=getattr(func, "__name__", "custom")
        )

    def build_request(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> dict[str, Any]:
        """Arguments passed to the callback."""
        return {"request": request, "prompt": prompt, "history": list(history)}

    def extract_raw_text(self, response: Any) -> str:
        """Accept the callback's return value if it is non-empty text."""
        if not response or not isinstance(response, str):
            raise ProviderResponseException(
                "Custom provider returned invalid response",
                provider=self.family.value,
                model=self.provider.model,
            )
        return response

    def complete(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> str:
        """Invoke a synchronous callback."""
        kwargs = self.build_request(request, prompt, history)
        self._log_dispatch(history)

        try:
            response = self.func(kwargs["request"], kwargs["prompt"], kwargs["history"])
        except Exception as e:
            raise self._provider_error(e) from e

        if inspect.isawaitable(response):
            if hasattr(response, "close"):
                response.close()
            raise ConfigurationException(
                "Async provider callbacks must be used with aextract",
                config_key="provider",
            )

        return self.extract_raw_text(response)

    async def acomplete(
        self,
        request: ExtractionRequest,
        prompt: str,
        history: Sequence[Attempt],
    ) -> str:
        """Invoke a synchronous or coroutine callback."""
        kwargs = self.build_request(request, prompt, history)
        self._log_dispatch(history)

        try:
            response = self.func(kwargs["request"], kwargs["prompt"], kwargs["history"])
            if inspect.isawaitable(response):
                response = await response
        except Exception as e:
            raise self._provider_error(e) from e

        return self.extract_raw_text(response)


class ProviderAdapterFactory:
    """Factory selecting the adapter for a provider by its endpoint host."""

    def get_family(self, provider: ProviderIdentity | ProviderFunc) -> ProviderFamily:
        """Determine the provider family.

        Args:
            provider: Provider identity or custom callback

        Returns:
            ProviderFamily; unrecognized hosts fall back to OpenAI-compatible
        """
        if not isinstance(provider, ProviderIdentity):
            if callable(provider):
                return ProviderFamily.CUSTOM_FUNCTION
            raise ConfigurationException(
                "Provider must be a ProviderIdentity or a callable",
                config_key="provider",
            )

        host = _endpoint_host(provider.url)
        if host == GOOGLE_HOST:
            return ProviderFamily.GOOGLE_LIKE
        if host == ANTHROPIC_HOST or host.endswith(f".{ANTHROPIC_HOST}"):
            return ProviderFamily.ANTHROPIC_LIKE
        return ProviderFamily.OPENAI_COMPATIBLE

    def get_adapter(
        self,
        provider: ProviderIdentity | ProviderFunc,
        timeout: float | None = None,
    ) -> BaseProviderAdapter:
        """Get the adapter instance for a provider.

        Args:
            provider: Provider identity or custom callback
            timeout: Per-call timeout in seconds

        Returns:
            Adapter bound to the provider
        """
        family = self.get_family(provider)
        logger.debug("Selected %s adapter", family.value)

        if family is ProviderFamily.CUSTOM_FUNCTION:
            return CustomFunctionAdapter(provider, timeout=timeout)  # type: ignore[arg-type]

        adapter_class = ADAPTERS[family]
        return adapter_class(provider, timeout=timeout)  # type: ignore[arg-type]


ADAPTERS: dict[ProviderFamily, type[BaseProviderAdapter]] = {
    ProviderFamily.OPENAI_COMPATIBLE: OpenAICompatibleAdapter,
    ProviderFamily.ANTHROPIC_LIKE: AnthropicAdapter,
    ProviderFamily.GOOGLE_LIKE: GoogleAdapter,
}


def _endpoint_host(url: str) -> str:
    parsed = urlparse(url if "//" in url else f"//{url}")
    return (parsed.hostname or "").lower()
