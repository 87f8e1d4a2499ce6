"""Tests for decoding the chunked response body."""

from __future__ import annotations

import json
import logging

import pytest

from grok_client.conversation.decoder import (
    decode_chunk,
    decode_stream,
    events_from_record,
)
from grok_client.conversation.types import (
    DeltaText,
    FollowUps,
    ImageAttachmentAnnounced,
    Unrecognized,
)
from grok_client.errors import DecodeError


async def _aiter(chunks):
    for chunk in chunks:
        yield chunk


async def _collect(chunks):
    return [record async for record in decode_stream(_aiter(chunks))]


def _chunk(record: dict) -> bytes:
    return json.dumps(record).encode("utf-8")


@pytest.mark.asyncio
async def test_decodes_one_record_per_chunk():
    chunks = [_chunk({"result": {"message": str(i)}}) for i in range(3)]

    records = await _collect(chunks)

    assert [record["result"]["message"] for record in records] == ["0", "1", "2"]


@pytest.mark.asyncio
async def test_malformed_chunk_is_dropped_and_stream_continues(caplog):
    chunks = [
        _chunk({"result": {"message": "a"}}),
        b'{"result": {"mess',
        _chunk({"result": {"message": "b"}}),
        _chunk({"result": {"message": "c"}}),
    ]

    with caplog.at_level(logging.WARNING, logger="grok_client.conversation.decoder"):
        records = await _collect(chunks)

    assert len(records) == len(chunks) - 1
    assert [record["result"]["message"] for record in records] == ["a", "b", "c"]
    assert "Failed to parse stream chunk" in caplog.text


@pytest.mark.asyncio
async def test_empty_stream_yields_nothing():
    assert await _collect([]) == []


@pytest.mark.asyncio
async def test_non_object_and_invalid_utf8_chunks_are_skipped():
    chunks = [b"[1, 2]", b"\xff\xfe\xfd", _chunk({"result": {"message": "ok"}})]

    records = await _collect(chunks)

    assert records == [{"result": {"message": "ok"}}]


def test_decode_chunk_splits_newline_delimited_records():
    chunk = b'{"result": {"message": "a"}}\n{"result": {"message": "b"}}\n'

    assert decode_chunk(chunk) == [
        {"result": {"message": "a"}},
        {"result": {"message": "b"}},
    ]


def test_decode_chunk_blank_chunk_is_empty():
    assert decode_chunk(b"\n  \n") == []


def test_decode_chunk_raises_decode_error():
    with pytest.raises(DecodeError):
        decode_chunk(b"not json")


class TestEventsFromRecord:
    def test_delta_text(self):
        record = {"result": {"message": "Hi"}}

        (event,) = events_from_record(record)

        assert event == DeltaText("Hi")
        assert event.raw is record

    def test_image_attachment(self):
        record = {
            "result": {
                "imageAttachment": {
                    "fileName": "img.jpg",
                    "mimeType": "image/jpeg",
                    "mediaIdStr": "123",
                    "imageUrl": "https://example.com/img.jpg",
                }
            }
        }

        (event,) = events_from_record(record)

        assert isinstance(event, ImageAttachmentAnnounced)
        assert event.attachment.file_name == "img.jpg"
        assert event.attachment.media_id_str == "123"
        assert event.attachment.image_url == "https://example.com/img.jpg"

    def test_follow_ups(self):
        (event,) = events_from_record(
            {"result": {"followUpSuggestions": ["More?", "Why?"]}}
        )

        assert event == FollowUps(("More?", "Why?"))

    def test_combined_record_expands_in_order(self):
        record = {
            "result": {
                "followUpSuggestions": ["Next"],
                "message": "text",
                "imageAttachment": {"fileName": "x.jpg", "mimeType": "image/jpeg"},
            }
        }

        events = events_from_record(record)

        assert [type(event) for event in events] == [
            DeltaText,
            ImageAttachmentAnnounced,
            FollowUps,
        ]

    def test_records_without_result_are_unrecognized(self):
        record = {"conversationId": "c1", "userChatItemId": "u1"}

        assert events_from_record(record) == [Unrecognized(raw=record)]

    def test_empty_message_is_unrecognized(self):
        record = {"result": {"message": ""}}

        assert events_from_record(record) == [Unrecognized(raw=record)]

    def test_bad_result_shape_is_unrecognized(self):
        record = {"result": {"imageAttachment": "not-an-object"}}

        assert events_from_record(record) == [Unrecognized(raw=record)]

    def test_malformed_image_keeps_message_delta(self, caplog):
        record = {
            "result": {
                "message": "hi",
                "imageAttachment": {"fileName": None, "mimeType": "image/jpeg"},
            }
        }

        with caplog.at_level(logging.WARNING, logger="grok_client.conversation.decoder"):
            events = events_from_record(record)

        assert events == [DeltaText("hi")]
        assert "imageAttachment" in caplog.text

    def test_malformed_follow_ups_keep_message_delta(self):
        record = {
            "result": {
                "message": "Hello there",
                "followUpSuggestions": [{"label": "x"}],
            }
        }

        assert events_from_record(record) == [DeltaText("Hello there")]

    def test_non_text_message_keeps_valid_follow_ups(self):
        record = {"result": {"message": 42, "followUpSuggestions": ["Next"]}}

        assert events_from_record(record) == [FollowUps(("Next",))]
