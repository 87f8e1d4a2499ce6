"""Read-only views over a completed exchange."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..errors import ProtocolError
from ..image_metadata import extract_image_prompts
from .types import FileAttachment, GrokAPI, StreamEvent


class GeneratedAttachment:
    """An attachment produced by the agent; bytes are fetched on demand."""

    __slots__ = ("_client", "_attachment", "_data")

    def __init__(
        self,
        client: GrokAPI,
        attachment: FileAttachment,
        data: Optional[bytes] = None,
    ) -> None:
        self._client = client
        self._attachment = attachment
        self._data = data

    @property
    def attachment(self) -> FileAttachment:
        return self._attachment

    @property
    def file_name(self) -> str:
        return self._attachment.file_name

    @property
    def mime_type(self) -> str:
        return self._attachment.mime_type

    @property
    def media_id(self) -> Optional[str]:
        return self._attachment.remote_id

    @property
    def url(self) -> Optional[str]:
        return self._attachment.remote_url

    async def get_bytes(self) -> bytes:
        if self._data is None:
            if not self._attachment.remote_url:
                raise ProtocolError(
                    "get_bytes", f"Attachment {self.file_name!r} has no URL to fetch"
                )
            self._data = await self._client.get_image(self._attachment.remote_url)
        return self._data

    async def download(self, path: Union[str, Path]) -> Path:
        """Write the attachment to ``path`` and return the resolved path."""

        target = Path(path)
        data = await self.get_bytes()
        await asyncio.to_thread(target.write_bytes, data)
        return target.resolve()

    async def get_prompts(self) -> tuple[str, str]:
        """Return ``(prompt, upsampled_prompt)`` embedded in the image."""

        return extract_image_prompts(await self.get_bytes())

    def __repr__(self) -> str:
        return f"<GeneratedAttachment file_name={self.file_name!r} url={self.url!r}>"


@dataclass(frozen=True)
class GeneratedContent:
    """Snapshot of one ``generate`` call.

    ``message`` is what was committed to the transcript; ``streamed_message``
    keeps the concatenated deltas even when an image prompt replaced them.
    """

    message: str
    streamed_message: str = ""
    follow_up_suggestions: tuple[str, ...] = ()
    attachments: tuple[GeneratedAttachment, ...] = ()
    image_prompt: str = ""
    upsampled_image_prompt: str = ""
    events: tuple[StreamEvent, ...] = field(default=(), repr=False)

    def __str__(self) -> str:
        return self.message


__all__ = ["GeneratedAttachment", "GeneratedContent"]
