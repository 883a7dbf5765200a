"""Best-effort extraction of a JSON object from free-text model replies."""

import json
import re
from dataclasses import dataclass
from typing import Any

# First "{" to last "}", across newlines
GREEDY_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
# Shortest "{...}" runs, non-overlapping
MINIMAL_OBJECT = re.compile(r"\{[\s\S]*?\}")


@dataclass(frozen=True)
class ParsedResponse:
    """Raw reply text and the JSON value found in it (None if none parsed)."""

    raw: str
    structured: Any | None = None


def parse_json_substring(raw: str) -> ParsedResponse:
    """Extract and parse a JSON object from a string.

    The greedy candidate spanning the first ``{`` to the last ``}`` is tried
    first, then every minimal ``{...}`` substring. Within each group later
    candidates are tried first, since models often restate an example before
    giving the final answer.

    Args:
        raw: Reply text from the provider

    Returns:
        ParsedResponse with the first candidate that parses, or
        ``structured=None`` if none does. The raw text is always kept.
    """
    for candidate in candidate_substrings(raw):
        try:
            return ParsedResponse(raw=raw, structured=json.loads(candidate))
        except json.JSONDecodeError:
            continue

    return ParsedResponse(raw=raw, structured=None)


def candidate_substrings(raw: str) -> list[str]:
    """List JSON candidates in the order they should be tried."""
    greedy = GREEDY_OBJECT.findall(raw or "")
    minimal = MINIMAL_OBJECT.findall(raw or "")
    return [*reversed(greedy), *reversed(minimal)]
