"""Pydantic models for the Grok wire payloads."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawHistoryItem(BaseModel):
    """A conversation item as returned by the history endpoint."""

    sender_type: Any
    message: Optional[str] = ""
    file_attachments: Optional[List[Any]] = None

    model_config = ConfigDict(extra="allow")


class ApiImageAttachment(BaseModel):
    """An image announced inside a streamed ``result``."""

    file_name: str = Field(default="", alias="fileName")
    mime_type: str = Field(default="", alias="mimeType")
    media_id_str: Optional[str] = Field(default=None, alias="mediaIdStr")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


__all__ = [
    "ApiImageAttachment",
    "RawHistoryItem",
]
