"""Conversation exchange state machine."""

from __future__ import annotations

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Iterable, Optional

from ..constants import DEFAULT_IMAGE_GENERATION_COUNT, DEFAULT_MODEL
from ..errors import BinaryFormatError
from ..image_metadata import extract_image_prompts
from .content import GeneratedAttachment, GeneratedContent
from .decoder import decode_stream, events_from_record
from .history import decode_wire_history, encode_for_send
from .types import (
    AttachmentRef,
    DeltaText,
    ExchangeState,
    FileAttachment,
    FollowUps,
    GrokAPI,
    ImageAttachmentAnnounced,
    Sender,
    StreamEvent,
    Turn,
    attachment_from_wire,
)

logger = logging.getLogger(__name__)

IMAGE_PROMPT_SUMMARY = "I generated images with the prompt: '{prompt}'"


@dataclass
class Exchange:
    """Mutable accumulator for a single send/stream/commit cycle."""

    message: str
    user_attachments: tuple[AttachmentRef, ...]
    model: str
    image_generation_count: int
    state: ExchangeState = ExchangeState.IDLE
    deltas: list[str] = field(default_factory=list)
    attachments: list[FileAttachment] = field(default_factory=list)
    follow_up_suggestions: tuple[str, ...] = ()
    events: list[StreamEvent] = field(default_factory=list)
    image_bytes: Optional[bytes] = None
    image_prompt: str = ""
    upsampled_image_prompt: str = ""
    final_message: Optional[str] = None

    @property
    def streamed_message(self) -> str:
        return "".join(self.deltas)

    def accumulate(self, event: StreamEvent) -> None:
        self.events.append(event)
        if isinstance(event, DeltaText):
            self.deltas.append(event.text)
        elif isinstance(event, ImageAttachmentAnnounced):
            self.attachments.append(FileAttachment.from_api_image(event.attachment))
        elif isinstance(event, FollowUps):
            self.follow_up_suggestions = event.suggestions


class GrokConversation:
    """A single Grok conversation and its append-only transcript."""

    def __init__(
        self,
        client: GrokAPI,
        conversation_id: str,
        history: Iterable[Turn] = (),
        *,
        default_model: str = DEFAULT_MODEL,
        default_image_generation_count: int = DEFAULT_IMAGE_GENERATION_COUNT,
    ) -> None:
        self._client = client
        self.id = conversation_id
        self._history: list[Turn] = list(history)
        self._default_model = default_model
        self._default_image_generation_count = default_image_generation_count
        self._state = ExchangeState.IDLE

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def state(self) -> ExchangeState:
        """State of the most recent exchange."""

        return self._state

    async def load_history(self) -> None:
        """Replace the transcript with the server-side history."""

        items = await self._client.get_conversation_items(self.id)
        turns = decode_wire_history(items)
        self._history = turns
        logger.debug("Loaded %d turn(s) for conversation %s", len(turns), self.id)

    def _new_exchange(
        self,
        message: str,
        file_attachments: Iterable[Any],
        model: Optional[str],
        image_generation_count: Optional[int],
    ) -> Exchange:
        return Exchange(
            message=message,
            user_attachments=tuple(
                attachment_from_wire(item) for item in file_attachments
            ),
            model=model or self._default_model,
            image_generation_count=(
                self._default_image_generation_count
                if image_generation_count is None
                else image_generation_count
            ),
        )

    def _transition(self, exchange: Exchange, state: ExchangeState) -> None:
        logger.debug(
            "Conversation %s exchange %s -> %s",
            self.id,
            exchange.state.value,
            state.value,
        )
        exchange.state = state
        self._state = state

    async def _run(self, exchange: Exchange) -> AsyncGenerator[StreamEvent, None]:
        try:
            self._transition(exchange, ExchangeState.SENDING)
            responses = encode_for_send(
                self._history, exchange.message, exchange.user_attachments
            )
            chunks = self._client.add_response(
                responses,
                self.id,
                exchange.model,
                exchange.image_generation_count,
            )

            # The request is issued on the first pull from ``chunks``.
            self._transition(exchange, ExchangeState.STREAMING)
            async with aclosing(chunks), aclosing(decode_stream(chunks)) as records:
                async for record in records:
                    for event in events_from_record(record):
                        exchange.accumulate(event)
                        yield event

            self._transition(exchange, ExchangeState.FINALIZING)
            await self._finalize(exchange)
            self._commit(exchange)
            self._transition(exchange, ExchangeState.COMMITTED)
        except BaseException:
            self._transition(exchange, ExchangeState.FAILED)
            raise

    async def _finalize(self, exchange: Exchange) -> None:
        final_message = exchange.streamed_message
        first = exchange.attachments[0] if exchange.attachments else None
        if first is not None and first.remote_url:
            exchange.image_bytes = await self._client.get_image(first.remote_url)
            try:
                prompt, upsampled = extract_image_prompts(exchange.image_bytes)
            except BinaryFormatError as exc:
                logger.warning(
                    "Ignoring unreadable image metadata for %s: %s",
                    first.file_name,
                    exc.detail,
                )
                prompt, upsampled = "", ""
            exchange.image_prompt = prompt
            exchange.upsampled_image_prompt = upsampled
            if prompt:
                final_message = IMAGE_PROMPT_SUMMARY.format(prompt=prompt)
        elif first is not None:
            logger.debug(
                "First attachment %s has no URL; keeping text", first.file_name
            )
        exchange.final_message = final_message

    def _commit(self, exchange: Exchange) -> None:
        user_turn = Turn(
            message=exchange.message,
            sender=Sender.USER,
            attachments=exchange.user_attachments,
        )
        agent_turn = Turn(
            message=exchange.final_message or "",
            sender=Sender.AGENT,
            attachments=tuple(exchange.attachments),
        )
        self._history.extend((user_turn, agent_turn))

    async def stream(
        self,
        message: str,
        file_attachments: Iterable[Any] = (),
        model: Optional[str] = None,
        image_generation_count: Optional[int] = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """Send ``message`` and yield every stream event as it arrives.

        Both turns are appended to the transcript only after the stream is
        drained; abandoning the iteration leaves the transcript untouched.
        """

        exchange = self._new_exchange(
            message, file_attachments, model, image_generation_count
        )
        async with aclosing(self._run(exchange)) as events:
            async for event in events:
                yield event

    async def generate(
        self,
        message: str,
        file_attachments: Iterable[Any] = (),
        model: Optional[str] = None,
        image_generation_count: Optional[int] = None,
    ) -> GeneratedContent:
        """Run a full exchange and return its final content."""

        exchange = self._new_exchange(
            message, file_attachments, model, image_generation_count
        )
        async with aclosing(self._run(exchange)) as events:
            async for _ in events:
                pass

        attachments = tuple(
            GeneratedAttachment(
                self._client,
                attachment,
                exchange.image_bytes if index == 0 else None,
            )
            for index, attachment in enumerate(exchange.attachments)
        )
        return GeneratedContent(
            message=exchange.final_message or "",
            streamed_message=exchange.streamed_message,
            follow_up_suggestions=exchange.follow_up_suggestions,
            attachments=attachments,
            image_prompt=exchange.image_prompt,
            upsampled_image_prompt=exchange.upsampled_image_prompt,
            events=tuple(exchange.events),
        )

    def __repr__(self) -> str:
        return f'<GrokConversation id="{self.id}">'


__all__ = ["Exchange", "GrokConversation", "IMAGE_PROMPT_SUMMARY"]
