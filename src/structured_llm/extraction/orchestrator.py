"""Extraction orchestrator: the validate-and-retry loop around a provider."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from structured_llm.exceptions import SchemaException
from structured_llm.extraction.models import (
    Attempt,
    ExtractionRequest,
    ExtractionResult,
)
from structured_llm.extraction.parser import parse_json_substring
from structured_llm.extraction.prompts import build_instruction_prompt
from structured_llm.files.media import check_media_type
from structured_llm.providers.adapters import (
    BaseProviderAdapter,
    ProviderAdapterFactory,
)
from structured_llm.schema.compiler import compile_schema
from structured_llm.schema.guard import find_disallowed_keyword
from structured_llm.schema.manager import SchemaManager
from structured_llm.schema.refs import dereference_schema
from structured_llm.schema.validators import ResultValidator
from structured_llm.utils.config import ExtractorConfig, resolve_provider

logger = logging.getLogger(__name__)


class ExtractionState(Enum):
    """States of the extraction state machine."""

    COMPILING = "compiling"
    DISPATCHING = "dispatching"
    PARSING = "parsing"
    VALIDATING = "validating"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class _ExtractionPlan:
    """Everything fixed once per request before the first dispatch."""

    request: ExtractionRequest
    schema: dict[str, Any]
    adapter: BaseProviderAdapter
    prompt: str
    max_attempts: int


class StructuredExtractor:
    """Extracts schema-conforming JSON from text or images via an LLM.

    The schema is screened and compiled once per request. The selected
    provider adapter is then called until the reply validates or the attempt
    budget runs out; each retry carries feedback about the most recent failed
    attempts. Provider errors end the request immediately.
    """

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        schema_manager: SchemaManager | None = None,
        adapter_factory: ProviderAdapterFactory | None = None,
        validator: ResultValidator | None = None,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: Extractor configuration (defaults to ExtractorConfig())
            schema_manager: Resolves schema names; a default manager is used
                if None
            adapter_factory: Selects provider adapters
            validator: Validates extracted values
            sleep: Sleep function used between attempts by ``extract``
            async_sleep: Sleep coroutine used between attempts by ``aextract``
        """
        self.config = config or ExtractorConfig()
        self._schema_manager = schema_manager or SchemaManager()
        self._adapter_factory = adapter_factory or ProviderAdapterFactory()
        self._validator = validator or ResultValidator()
        self._sleep = sleep
        self._async_sleep = async_sleep

    def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Run an extraction request to a terminal result.

        Args:
            request: The extraction request

        Returns:
            ExtractionResult; ``status`` is EXHAUSTED (and ``valid`` False)
            when the attempt budget ran out without a valid reply

        Raises:
            SchemaException: If the schema is rejected
            InputTypeException: If the media type is not supported
            ConfigurationException: If no usable provider is available
            ProviderException: If a provider call fails (never retried)
        """
        plan = self._prepare(request)
        history: list[Attempt] = []

        retrying = Retrying(sleep=self._sleep, **self._retry_policy(plan))
        attempt = retrying(self._run_attempt, plan, history)
        return self._finish(attempt, plan)

    async def aextract(self, request: ExtractionRequest) -> ExtractionResult:
        """Async variant of ``extract``.

        Cancelling the awaiting task cancels the in-flight provider call; the
        partial attempt history is discarded.
        """
        plan = self._prepare(request)
        history: list[Attempt] = []

        retrying = AsyncRetrying(sleep=self._async_sleep, **self._retry_policy(plan))
        attempt = await retrying(self._arun_attempt, plan, history)
        return self._finish(attempt, plan)

    def _prepare(self, request: ExtractionRequest) -> _ExtractionPlan:
        schema = self._schema_manager.resolve(request.schema_)
        dereferenced = dereference_schema(schema)

        keyword = find_disallowed_keyword(dereferenced)
        if keyword is not None:
            raise SchemaException(
                f"Disallowed property '{keyword}' found in schema",
                schema=schema,
                reason="disallowed_keyword",
            )

        check_media_type(request.type, request.input)

        provider = resolve_provider(self.config, request.provider)
        adapter = self._adapter_factory.get_adapter(
            provider,  # type: ignore[arg-type]
            timeout=self.config.request_timeout,
        )

        self._transition(ExtractionState.COMPILING)
        compiled = compile_schema(dereferenced, strict=self.config.strict_schema_types)

        return _ExtractionPlan(
            request=request,
            schema=dereferenced,
            adapter=adapter,
            prompt=build_instruction_prompt(compiled),
            max_attempts=request.max_attempts or self.config.max_attempts,
        )

    def _retry_policy(self, plan: _ExtractionPlan) -> dict[str, Any]:
        return {
            "stop": stop_after_attempt(plan.max_attempts),
            "wait": wait_exponential(
                multiplier=self.config.retry_backoff_initial,
                max=self.config.retry_backoff_max,
            ),
            # Only invalid results are retried; provider errors propagate
            "retry": retry_if_result(lambda attempt: not attempt.valid),
            "retry_error_callback": lambda state: state.outcome.result(),
            "before_sleep": self._log_retry,
        }

    def _feedback(self, history: list[Attempt]) -> list[Attempt]:
        window = self.config.feedback_window
        return history[-window:] if window > 0 else []

    def _run_attempt(self, plan: _ExtractionPlan, history: list[Attempt]) -> Attempt:
        number = len(history) + 1
        self._transition(ExtractionState.DISPATCHING, number)
        raw = plan.adapter.complete(plan.request, plan.prompt, self._feedback(history))
        return self._evaluate(plan, raw, number, history)

    async def _arun_attempt(
        self, plan: _ExtractionPlan, history: list[Attempt]
    ) -> Attempt:
        number = len(history) + 1
        self._transition(ExtractionState.DISPATCHING, number)
        raw = await plan.adapter.acomplete(
            plan.request, plan.prompt, self._feedback(history)
        )
        return self._evaluate(plan, raw, number, history)

    def _evaluate(
        self,
        plan: _ExtractionPlan,
        raw: str,
        number: int,
        history: list[Attempt],
    ) -> Attempt:
        self._transition(ExtractionState.PARSING, number)
        parsed = parse_json_substring(raw)

        self._transition(ExtractionState.VALIDATING, number)
        outcome = self._validator.validate(plan.schema, parsed.structured)

        attempt = Attempt(
            number=number,
            raw=parsed.raw,
            structured=parsed.structured,
            valid=outcome.valid,
            errors=outcome.errors,
        )
        if not attempt.valid:
            history.append(attempt)
        return attempt

    def _finish(self, attempt: Attempt, plan: _ExtractionPlan) -> ExtractionResult:
        result = ExtractionResult.from_attempt(attempt)
        if result.valid:
            self._transition(ExtractionState.SUCCEEDED, attempt.number)
            logger.info(
                "Extraction succeeded after %d/%d attempt(s)",
                attempt.number,
                plan.max_attempts,
            )
        else:
            self._transition(ExtractionState.EXHAUSTED, attempt.number)
            logger.warning(
                "Extraction exhausted %d attempt(s) with %d validation error(s)",
                attempt.number,
                len(attempt.errors),
            )
        return result

    def _log_retry(self, retry_state: RetryCallState) -> None:
        attempt = retry_state.outcome.result() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Attempt %d failed validation with %d error(s); retrying in %.2fs",
            retry_state.attempt_number,
            len(attempt.errors) if attempt else 0,
            delay,
        )
        self._transition(ExtractionState.RETRYING, retry_state.attempt_number)

    def _transition(self, state: ExtractionState, attempt: int | None = None) -> None:
        if attempt is None:
            logger.debug("Extraction state -> %s", state.value)
        else:
            logger.debug("Extraction state -> %s (attempt %d)", state.value, attempt)
