"""Input media type checks."""

from .media import SUPPORTED_MEDIA_TYPES, check_media_type, is_base64

__all__ = ["SUPPORTED_MEDIA_TYPES", "check_media_type", "is_base64"]
