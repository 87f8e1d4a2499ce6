"""Type definitions for the conversation engine."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import (
    Any,
    AsyncGenerator,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from ..schemas import ApiImageAttachment


class Sender(IntEnum):
    """Turn author; the value is the code used in ``responses`` payloads."""

    USER = 1
    AGENT = 2

    @property
    def tag(self) -> str:
        """History endpoint tag (``"User"`` or ``"Agent"``)."""

        return self.name.capitalize()


@dataclass(frozen=True)
class FileAttachment:
    """A file known to the API by id and/or URL."""

    file_name: str
    mime_type: str
    remote_id: Optional[str] = None
    remote_url: Optional[str] = None
    raw: Optional[Mapping[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_api_image(cls, image: ApiImageAttachment) -> "FileAttachment":
        return cls(
            file_name=image.file_name,
            mime_type=image.mime_type,
            remote_id=image.media_id_str,
            remote_url=image.image_url,
        )

    def to_wire(self) -> dict[str, Any]:
        if self.raw is not None:
            return deepcopy(dict(self.raw))
        return {
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "mediaId": self.remote_id,
            "url": self.remote_url,
        }


@dataclass(frozen=True)
class UnknownAttachment:
    """An attachment payload whose shape is not recognised; kept verbatim."""

    raw: Any

    def to_wire(self) -> Any:
        return deepcopy(self.raw)


AttachmentRef = Union[FileAttachment, UnknownAttachment]

_NAME_KEYS = ("fileName", "file_name", "name")
_MIME_KEYS = ("mimeType", "mime_type")
_ID_KEYS = ("mediaIdStr", "mediaId", "media_id", "fileId", "id")
_URL_KEYS = ("imageUrl", "url", "fileUri")


def _first(raw: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def attachment_from_wire(raw: Any) -> AttachmentRef:
    """Normalise an upload result or history attachment into an AttachmentRef."""

    if isinstance(raw, (FileAttachment, UnknownAttachment)):
        return raw
    if not isinstance(raw, Mapping):
        return UnknownAttachment(deepcopy(raw))

    remote_id = _first(raw, _ID_KEYS)
    remote_url = _first(raw, _URL_KEYS)
    if remote_id is None and remote_url is None:
        return UnknownAttachment(deepcopy(dict(raw)))

    return FileAttachment(
        file_name=_first(raw, _NAME_KEYS) or "",
        mime_type=_first(raw, _MIME_KEYS) or "",
        remote_id=remote_id,
        remote_url=remote_url,
        raw=deepcopy(dict(raw)),
    )


@dataclass(frozen=True)
class Turn:
    message: str
    sender: Sender
    attachments: tuple[AttachmentRef, ...] = ()


@dataclass(frozen=True)
class DeltaText:
    text: str
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ImageAttachmentAnnounced:
    attachment: ApiImageAttachment
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class FollowUps:
    suggestions: tuple[str, ...]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Unrecognized:
    raw: Mapping[str, Any] = field(default_factory=dict)


StreamEvent = Union[DeltaText, ImageAttachmentAnnounced, FollowUps, Unrecognized]


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    COMMITTED = "committed"
    FAILED = "failed"


class GrokAPI(Protocol):
    """Transport operations the conversation engine depends on."""

    async def get_conversation_items(
        self, conversation_id: str
    ) -> list[dict[str, Any]]:
        ...

    def add_response(
        self,
        responses: list[dict[str, Any]],
        conversation_id: str,
        model: str,
        image_generation_count: int,
    ) -> AsyncGenerator[bytes, None]:
        ...

    async def get_image(self, url: str) -> bytes:
        ...


__all__ = [
    "AttachmentRef",
    "DeltaText",
    "ExchangeState",
    "FileAttachment",
    "FollowUps",
    "GrokAPI",
    "ImageAttachmentAnnounced",
    "Sender",
    "StreamEvent",
    "Turn",
    "UnknownAttachment",
    "Unrecognized",
    "attachment_from_wire",
]
