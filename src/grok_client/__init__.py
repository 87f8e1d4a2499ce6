"""Async client for the Grok conversational API."""

from .client import GrokClient
from .config import Settings, get_settings
from .conversation import (
    DeltaText,
    ExchangeState,
    FileAttachment,
    FollowUps,
    GeneratedAttachment,
    GeneratedContent,
    GrokConversation,
    ImageAttachmentAnnounced,
    Sender,
    Turn,
    UnknownAttachment,
    Unrecognized,
)
from .credentials import CredentialProvider
from .errors import (
    BinaryFormatError,
    ConfigurationError,
    DecodeError,
    GrokError,
    InvalidSenderTypeError,
    MissingCredentialError,
    ProtocolError,
    ValidationError,
)
from .image_metadata import extract_image_comment, extract_image_prompts

__all__ = [
    "BinaryFormatError",
    "ConfigurationError",
    "CredentialProvider",
    "DecodeError",
    "DeltaText",
    "ExchangeState",
    "FileAttachment",
    "FollowUps",
    "GeneratedAttachment",
    "GeneratedContent",
    "GrokClient",
    "GrokConversation",
    "GrokError",
    "ImageAttachmentAnnounced",
    "InvalidSenderTypeError",
    "MissingCredentialError",
    "ProtocolError",
    "Sender",
    "Settings",
    "Turn",
    "UnknownAttachment",
    "Unrecognized",
    "ValidationError",
    "extract_image_comment",
    "extract_image_prompts",
    "get_settings",
]
