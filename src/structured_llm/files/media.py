"""Media types accepted as extraction input."""

import base64
import binascii
import re

from structured_llm.exceptions import InputTypeException

SUPPORTED_MEDIA_TYPES = (
    "text/plain",
    "application/json",
    "image/jpeg",
    "image/png",
)

_WHITESPACE = re.compile(r"\s+")


def is_base64(value: str) -> bool:
    """Return True if ``value`` is canonical base64 (whitespace ignored)."""
    normalized = _WHITESPACE.sub("", value or "")
    if not normalized:
        return False

    try:
        decoded = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError):
        return False

    return base64.b64encode(decoded).decode("ascii") == normalized


def check_media_type(media_type: str | None, data: str) -> None:
    """Reject input whose resolved media type is not supported.

    Args:
        media_type: Resolved media type, or None for plain text
        data: The input payload

    Raises:
        InputTypeException: For unsupported types, or image input that is
            not base64 encoded
    """
    if media_type is None:
        return

    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise InputTypeException(
            f"Provided content has invalid mime type: {media_type}",
            media_type=media_type,
        )

    if media_type.startswith("image/") and not is_base64(data):
        raise InputTypeException(
            f"Image input of type {media_type} must be base64 encoded",
            media_type=media_type,
        )
