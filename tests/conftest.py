import pathlib
import sys
from typing import Any, AsyncGenerator, Iterable

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from grok_client.config import Settings  # noqa: E402

CT0 = "0123456789abcdef"
COOKIE = f"auth_token=secret; ct0={CT0}; lang=en"


def make_jpeg_with_comment(comment: str, *, prefix: bytes = b"\xff\xd8") -> bytes:
    """Build a minimal JPEG-like buffer holding a COM segment."""

    payload = comment.encode("utf-8")
    length = len(payload) + 2
    return prefix + b"\xff\xfe" + length.to_bytes(2, "big") + payload + b"\xff\xd9"


class FakeGrokAPI:
    """In-memory stand-in for the transport used by the conversation engine."""

    def __init__(
        self,
        chunks: Iterable[bytes] = (),
        *,
        images: dict[str, bytes] | None = None,
        items: list[dict[str, Any]] | None = None,
        stream_error: Exception | None = None,
    ) -> None:
        self.chunks = list(chunks)
        self.images = dict(images or {})
        self.items = list(items or [])
        self.stream_error = stream_error
        self.sent: list[dict[str, Any]] = []
        self.image_requests: list[str] = []
        self.pulled = 0
        self.closed = False

    async def get_conversation_items(self, conversation_id: str) -> list[dict[str, Any]]:
        return self.items

    async def add_response(
        self,
        responses: list[dict[str, Any]],
        conversation_id: str,
        model: str,
        image_generation_count: int,
    ) -> AsyncGenerator[bytes, None]:
        self.sent.append(
            {
                "responses": responses,
                "conversation_id": conversation_id,
                "model": model,
                "image_generation_count": image_generation_count,
            }
        )
        if self.stream_error is not None:
            raise self.stream_error
        try:
            for chunk in self.chunks:
                self.pulled += 1
                yield chunk
        finally:
            self.closed = True

    async def get_image(self, url: str) -> bytes:
        self.image_requests.append(url)
        return self.images[url]


@pytest.fixture
def settings() -> Settings:
    return Settings(cookies=COOKIE, lang="en-US", timeout=5)
