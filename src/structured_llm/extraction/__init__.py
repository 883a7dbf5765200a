"""Extraction records, reply parsing and prompt construction."""

from .models import (
    Attempt,
    ExtractionRequest,
    ExtractionResult,
    ExtractionStatus,
    ProviderFamily,
    ProviderFunc,
    ProviderIdentity,
)
from .parser import ParsedResponse, parse_json_substring
from .prompts import build_feedback_turns, build_instruction_prompt

__all__ = [
    "Attempt",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionStatus",
    "ProviderFamily",
    "ProviderFunc",
    "ProviderIdentity",
    "ParsedResponse",
    "parse_json_substring",
    "build_feedback_turns",
    "build_instruction_prompt",
]
