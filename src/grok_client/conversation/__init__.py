"""Conversation streaming and history reconciliation."""

from .content import GeneratedAttachment, GeneratedContent
from .engine import GrokConversation
from .types import (
    AttachmentRef,
    DeltaText,
    ExchangeState,
    FileAttachment,
    FollowUps,
    ImageAttachmentAnnounced,
    Sender,
    StreamEvent,
    Turn,
    UnknownAttachment,
    Unrecognized,
)

__all__ = [
    "AttachmentRef",
    "DeltaText",
    "ExchangeState",
    "FileAttachment",
    "FollowUps",
    "GeneratedAttachment",
    "GeneratedContent",
    "GrokConversation",
    "ImageAttachmentAnnounced",
    "Sender",
    "StreamEvent",
    "Turn",
    "UnknownAttachment",
    "Unrecognized",
]
