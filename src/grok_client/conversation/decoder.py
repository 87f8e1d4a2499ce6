"""Decode the chunked ``add_response`` body into JSON records and events."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncGenerator, AsyncIterable, List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import DecodeError, excerpt
from ..schemas import ApiImageAttachment
from .types import (
    DeltaText,
    FollowUps,
    ImageAttachmentAnnounced,
    StreamEvent,
    Unrecognized,
)

logger = logging.getLogger(__name__)

_FOLLOW_UPS = TypeAdapter(List[str])


def _decode_text(text: str, raw: bytes) -> dict[str, Any]:
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(
            "decode_chunk",
            f"{exc.msg} at line {exc.lineno} column {exc.colno}: {excerpt(raw)}",
        ) from exc
    if not isinstance(record, dict):
        raise DecodeError("decode_chunk", f"expected a JSON object: {excerpt(raw)}")
    return record


def decode_chunk(chunk: bytes) -> list[dict[str, Any]]:
    """Decode one transport chunk.

    A chunk normally holds exactly one record. When it does not parse as a
    whole, newline-delimited records inside it are decoded one by one; the
    first failing line raises only if nothing in the chunk decoded.
    """

    try:
        text = chunk.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("decode_chunk", f"{exc}: {excerpt(chunk)}") from exc

    if not text.strip():
        return []

    try:
        return [_decode_text(text, chunk)]
    except DecodeError:
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise

    records: list[dict[str, Any]] = []
    for line in lines:
        try:
            records.append(_decode_text(line, line.encode("utf-8")))
        except DecodeError as exc:
            logger.warning("Skipping undecodable stream line: %s", exc.detail)
    if not records:
        raise DecodeError("decode_chunk", f"no decodable records: {excerpt(chunk)}")
    return records


async def decode_stream(
    chunks: AsyncIterable[bytes],
) -> AsyncGenerator[dict[str, Any], None]:
    """Yield decoded records; malformed chunks are logged and dropped."""

    skipped = 0
    async for chunk in chunks:
        try:
            records = decode_chunk(chunk)
        except DecodeError as exc:
            skipped += 1
            logger.warning("Failed to parse stream chunk: %s", exc.detail)
            continue
        for record in records:
            yield record
    if skipped:
        logger.debug("Stream finished with %d undecodable chunk(s)", skipped)


def events_from_record(record: dict[str, Any]) -> list[StreamEvent]:
    """Expand one record into events in message, image, follow-up order.

    Each result field is classified on its own; a malformed field is logged
    and dropped without discarding its siblings.
    """

    result = record.get("result")
    if not isinstance(result, dict):
        return [Unrecognized(raw=record)]

    events: list[StreamEvent] = []

    message = result.get("message")
    if isinstance(message, str):
        if message:
            events.append(DeltaText(message, raw=record))
    elif message is not None:
        logger.warning("Ignoring non-text stream message: %s", excerpt(message))

    image = result.get("imageAttachment")
    if image is not None:
        try:
            attachment = ApiImageAttachment.model_validate(image)
        except PydanticValidationError as exc:
            logger.warning("Ignoring malformed imageAttachment: %s", excerpt(exc))
        else:
            events.append(ImageAttachmentAnnounced(attachment, raw=record))

    suggestions = result.get("followUpSuggestions")
    if suggestions is not None:
        try:
            parsed = _FOLLOW_UPS.validate_python(suggestions)
        except PydanticValidationError as exc:
            logger.warning("Ignoring malformed followUpSuggestions: %s", excerpt(exc))
        else:
            events.append(FollowUps(tuple(parsed), raw=record))

    if not events:
        events.append(Unrecognized(raw=record))
    return events


__all__ = ["decode_chunk", "decode_stream", "events_from_record"]
