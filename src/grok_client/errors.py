"""Exception hierarchy for the Grok client."""

from __future__ import annotations

from typing import Any, Optional

_EXCERPT_LIMIT = 300


def excerpt(raw: Any, limit: int = _EXCERPT_LIMIT) -> str:
    """Return a printable, truncated excerpt of a raw payload."""

    if isinstance(raw, (bytes, bytearray)):
        text = bytes(raw).decode("utf-8", errors="replace")
    else:
        text = str(raw)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class GrokError(Exception):
    """Base error carrying the failing operation and a diagnostic detail."""

    def __init__(
        self,
        operation: str,
        detail: Any,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail
        self.status_code = status_code


class ConfigurationError(GrokError):
    """The client cannot be constructed from the supplied configuration."""


class MissingCredentialError(ConfigurationError):
    """A required credential (the ``ct0`` CSRF cookie) is absent."""


class ProtocolError(GrokError):
    """The API answered with an unexpected shape, status, or no body."""


class DecodeError(GrokError):
    """A single stream frame could not be decoded."""


class ValidationError(GrokError):
    """A wire payload failed validation while being converted."""


class InvalidSenderTypeError(ValidationError):
    """A history item carried a sender tag other than ``User``/``Agent``."""

    def __init__(self, sender_type: Any) -> None:
        super().__init__("decode_wire_history", f"Invalid sender type: {sender_type!r}")
        self.sender_type = sender_type


class BinaryFormatError(GrokError):
    """Embedded image metadata points outside the buffer or is not text."""


__all__ = [
    "BinaryFormatError",
    "ConfigurationError",
    "DecodeError",
    "GrokError",
    "InvalidSenderTypeError",
    "MissingCredentialError",
    "ProtocolError",
    "ValidationError",
    "excerpt",
]
