"""Conversions between wire history payloads and the internal transcript."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..errors import InvalidSenderTypeError, ValidationError, excerpt
from ..schemas import RawHistoryItem
from .types import AttachmentRef, Sender, Turn, attachment_from_wire

_SENDER_TAGS: dict[str, Sender] = {sender.tag: sender for sender in Sender}


def _sender_from_tag(tag: Any) -> Sender:
    sender = _SENDER_TAGS.get(tag) if isinstance(tag, str) else None
    if sender is None:
        raise InvalidSenderTypeError(tag)
    return sender


def decode_wire_history(items: Sequence[Any]) -> list[Turn]:
    """Convert most-recent-first history items into a chronological transcript."""

    turns: list[Turn] = []
    for raw in reversed(list(items)):
        try:
            item = RawHistoryItem.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError(
                "decode_wire_history", f"malformed history item {excerpt(raw)}: {exc}"
            ) from exc
        sender = _sender_from_tag(item.sender_type)
        attachments = tuple(
            attachment_from_wire(entry) for entry in item.file_attachments or []
        )
        turns.append(
            Turn(message=item.message or "", sender=sender, attachments=attachments)
        )
    return turns


def _wire_attachments(attachments: Iterable[AttachmentRef]) -> list[Any]:
    return [attachment.to_wire() for attachment in attachments]


def encode_for_send(
    transcript: Sequence[Turn],
    message: str,
    attachments: Iterable[AttachmentRef] = (),
) -> list[dict[str, Any]]:
    """Build the ``responses`` list: prior turns followed by the new user turn.

    Every value is copied; the outgoing payload never aliases the transcript.
    """

    responses: list[dict[str, Any]] = [
        {
            "message": turn.message,
            "sender": int(turn.sender),
            "fileAttachments": _wire_attachments(turn.attachments),
        }
        for turn in transcript
    ]
    responses.append(
        {
            "message": message,
            "sender": int(Sender.USER),
            "promptSource": "",
            "fileAttachments": _wire_attachments(attachments),
        }
    )
    return responses


def decode_send_payload(responses: Sequence[dict[str, Any]]) -> list[Turn]:
    """Rebuild turns from an ``encode_for_send`` payload."""

    turns: list[Turn] = []
    for item in responses:
        try:
            sender = Sender(item.get("sender"))
        except ValueError as exc:
            raise InvalidSenderTypeError(item.get("sender")) from exc
        turns.append(
            Turn(
                message=item.get("message", ""),
                sender=sender,
                attachments=tuple(
                    attachment_from_wire(entry)
                    for entry in item.get("fileAttachments") or []
                ),
            )
        )
    return turns


def build_add_response_payload(
    responses: list[dict[str, Any]],
    conversation_id: str,
    model: str,
    image_generation_count: int,
) -> dict[str, Any]:
    """Return the exact request body of the ``add_response`` endpoint."""

    return {
        "responses": deepcopy(responses),
        "systemPromptName": "",
        "grokModelOptionId": model,
        "conversationId": conversation_id,
        "returnSearchResults": True,
        "returnCitations": True,
        "promptMetadata": {
            "promptSource": "NATURAL",
            "action": "INPUT",
        },
        "imageGenerationCount": image_generation_count,
        "requestFeatures": {
            "eagerTweets": True,
            "serverHistory": True,
        },
    }


__all__ = [
    "build_add_response_payload",
    "decode_send_payload",
    "decode_wire_history",
    "encode_for_send",
]
