"""Tests for converting between wire history and the transcript."""

from __future__ import annotations

from copy import deepcopy

import pytest

from grok_client.conversation.history import (
    build_add_response_payload,
    decode_send_payload,
    decode_wire_history,
    encode_for_send,
)
from grok_client.conversation.types import (
    FileAttachment,
    Sender,
    Turn,
    UnknownAttachment,
)
from grok_client.errors import InvalidSenderTypeError, ValidationError


def _items() -> list[dict]:
    # Most recent first, as returned by the API.
    return [
        {"sender_type": "Agent", "message": "Third"},
        {"sender_type": "User", "message": "Second", "file_attachments": []},
        {"sender_type": "Agent", "message": "First"},
    ]


class TestDecodeWireHistory:
    def test_reverses_into_chronological_order(self):
        items = _items()

        turns = decode_wire_history(items)

        assert len(turns) == len(items)
        assert [turn.message for turn in turns] == ["First", "Second", "Third"]
        assert [turn.sender for turn in turns] == [
            Sender.AGENT,
            Sender.USER,
            Sender.AGENT,
        ]

    def test_empty_history(self):
        assert decode_wire_history([]) == []

    def test_unknown_sender_raises_without_partial_result(self):
        items = _items()
        items.insert(1, {"sender_type": "System", "message": "??"})

        with pytest.raises(InvalidSenderTypeError) as excinfo:
            decode_wire_history(items)

        assert isinstance(excinfo.value, ValidationError)
        assert excinfo.value.sender_type == "System"

    def test_sender_tag_is_case_sensitive(self):
        with pytest.raises(InvalidSenderTypeError):
            decode_wire_history([{"sender_type": "user", "message": "hi"}])

    def test_malformed_item_raises_validation_error(self):
        with pytest.raises(ValidationError):
            decode_wire_history([{"message": "no sender"}])

    def test_attachments_are_normalised(self):
        items = [
            {
                "sender_type": "User",
                "message": "look",
                "file_attachments": [
                    {"fileName": "a.png", "mimeType": "image/png", "mediaId": "42"},
                    "opaque",
                ],
            }
        ]

        (turn,) = decode_wire_history(items)

        first, second = turn.attachments
        assert isinstance(first, FileAttachment)
        assert first.file_name == "a.png"
        assert first.remote_id == "42"
        assert isinstance(second, UnknownAttachment)
        assert second.raw == "opaque"

    def test_null_message_becomes_empty(self):
        (turn,) = decode_wire_history([{"sender_type": "Agent", "message": None}])
        assert turn.message == ""


class TestEncodeForSend:
    def test_appends_new_user_turn_last(self):
        transcript = decode_wire_history(_items())

        responses = encode_for_send(transcript, "Fourth")

        assert [item["message"] for item in responses] == [
            "First",
            "Second",
            "Third",
            "Fourth",
        ]
        assert responses[-1] == {
            "message": "Fourth",
            "sender": 1,
            "promptSource": "",
            "fileAttachments": [],
        }
        assert responses[0] == {"message": "First", "sender": 2, "fileAttachments": []}

    def test_does_not_mutate_or_alias_transcript(self):
        raw_attachment = {"fileName": "a.png", "mimeType": "image/png", "mediaId": "1"}
        transcript = [
            Turn(
                "Hello",
                Sender.USER,
                (FileAttachment("a.png", "image/png", "1", raw=raw_attachment),),
            ),
            Turn("Hi", Sender.AGENT),
        ]
        snapshot = deepcopy(transcript)

        responses = encode_for_send(transcript, "Next", [])
        responses[0]["fileAttachments"][0]["fileName"] = "changed.png"
        responses.append({"message": "extra"})

        assert transcript == snapshot
        assert transcript[0].attachments[0].raw["fileName"] == "a.png"

    def test_attachment_passthrough_keeps_wire_shape(self):
        uploaded = {"fileName": "b.jpg", "mimeType": "image/jpeg", "mediaId": "9"}
        attachment = FileAttachment("b.jpg", "image/jpeg", "9", raw=uploaded)

        responses = encode_for_send([], "with file", [attachment])

        assert responses[-1]["fileAttachments"] == [uploaded]
        assert responses[-1]["fileAttachments"][0] is not uploaded

    def test_round_trip_recovers_messages_and_senders(self):
        transcript = decode_wire_history(_items())

        responses = encode_for_send(transcript, "Fourth")
        rebuilt = decode_send_payload(responses)

        assert [(t.message, t.sender) for t in rebuilt] == [
            ("First", Sender.AGENT),
            ("Second", Sender.USER),
            ("Third", Sender.AGENT),
            ("Fourth", Sender.USER),
        ]

    def test_decode_send_payload_rejects_unknown_sender(self):
        with pytest.raises(InvalidSenderTypeError):
            decode_send_payload([{"message": "x", "sender": 3}])


def test_build_add_response_payload_shape():
    responses = encode_for_send([], "Hello")

    payload = build_add_response_payload(responses, "conv-1", "grok-2a", 4)

    assert payload == {
        "responses": responses,
        "systemPromptName": "",
        "grokModelOptionId": "grok-2a",
        "conversationId": "conv-1",
        "returnSearchResults": True,
        "returnCitations": True,
        "promptMetadata": {"promptSource": "NATURAL", "action": "INPUT"},
        "imageGenerationCount": 4,
        "requestFeatures": {"eagerTweets": True, "serverHistory": True},
    }
    assert payload["responses"] is not responses
