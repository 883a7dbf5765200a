"""Prompt text shared by every provider adapter."""

from collections.abc import Sequence

from structured_llm.extraction.models import Attempt, ExtractionRequest
from structured_llm.schema.compiler import CompiledPrompt
from structured_llm.schema.validators import format_validation_errors

SCHEMA_PREAMBLE = "Answer in JSON using this schema:"


def build_instruction_prompt(compiled: CompiledPrompt) -> str:
    """Build the schema instruction sent with every attempt.

    Args:
        compiled: Compiled schema for the request

    Returns:
        Prompt text carrying the shape string and field descriptions
    """
    return f"{SCHEMA_PREAMBLE}\n{compiled.shape}\n{compiled.descriptions_text}".rstrip()


def build_request_text(request: ExtractionRequest, prompt: str) -> str:
    """Join input, instruction and schema prompt into one text part.

    Image input is sent as its own content part, so only the instruction and
    the prompt are joined in that case.
    """
    parts = [] if request.is_image else [request.input]
    if request.instruction:
        parts.append(request.instruction)
    parts.append(prompt)
    return " ".join(part for part in parts if part)


def feedback_message(attempt: Attempt) -> str:
    """Describe a failed attempt so the model can correct itself."""
    return (
        f"You previously responded: {attempt.raw} "
        f"which produced validation errors: {format_validation_errors(attempt.errors)}. "
        "Please fix the errors and answer again with JSON only."
    )


def build_feedback_turns(history: Sequence[Attempt]) -> list[dict[str, str]]:
    """Build chat turns for each retained failed attempt, oldest first.

    Each attempt contributes the model's own reply as an assistant turn and
    a corrective user turn. The first attempt of a request has no history and
    gets no turns.
    """
    turns: list[dict[str, str]] = []
    for attempt in history:
        turns.append({"role": "assistant", "content": attempt.raw})
        turns.append({"role": "user", "content": feedback_message(attempt)})
    return turns
