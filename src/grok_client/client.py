"""HTTP client for the Grok endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, AsyncGenerator, Optional, Union

import httpx

from .config import Settings, get_settings
from .constants import Endpoint, GROK_CONVERSATION_ITEMS_FEATURES
from .conversation.engine import GrokConversation
from .conversation.history import build_add_response_payload
from .conversation.types import AttachmentRef, attachment_from_wire
from .credentials import CookieSource, CredentialProvider
from .errors import ProtocolError, excerpt

logger = logging.getLogger(__name__)

AttachmentSource = Union[str, Path, bytes]


class GrokClient:
    """Client responsible for talking to the Grok API over httpx."""

    def __init__(
        self,
        cookies: CookieSource = None,
        *,
        lang: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        if cookies is None:
            self._credentials = CredentialProvider.from_settings(
                self._settings, lang=lang
            )
        else:
            self._credentials = CredentialProvider(
                cookies, lang=lang or self._settings.lang
            )
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._client_lock = asyncio.Lock()

    @property
    def credentials(self) -> CredentialProvider:
        return self._credentials

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client

        async with self._client_lock:
            if self._http_client is None:
                timeout = httpx.Timeout(self._settings.request_timeout, connect=10.0)
                self._http_client = httpx.AsyncClient(timeout=timeout)
        return self._http_client

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        client = await self._get_http_client()
        try:
            response = await client.request(
                method,
                url,
                headers=headers or self._credentials.build_headers(),
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise ProtocolError(operation, str(exc)) from exc

        if response.status_code >= 400:
            detail = self._extract_error_detail(response.content)
            raise ProtocolError(operation, detail, status_code=response.status_code)
        return response

    async def _request_json(
        self, operation: str, method: str, url: str, **kwargs: Any
    ) -> Any:
        response = await self._request(operation, method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                operation, f"Invalid JSON response: {excerpt(response.content)}"
            ) from exc

    def _conversation(self, conversation_id: str) -> GrokConversation:
        return GrokConversation(
            self,
            conversation_id,
            default_model=self._settings.default_model,
            default_image_generation_count=self._settings.image_generation_count,
        )

    async def create_conversation(self) -> GrokConversation:
        """Create a new, empty conversation."""

        data = await self._request_json(
            "create_conversation",
            "POST",
            Endpoint.CREATE_GROK_CONVERSATION,
            json={},
        )
        conversation_id = (
            ((data or {}).get("data") or {}).get("create_grok_conversation") or {}
        ).get("conversation_id")
        if not isinstance(conversation_id, str) or not conversation_id:
            raise ProtocolError(
                "create_conversation",
                "Failed to create Grok conversation. Response was: "
                + excerpt(json.dumps(data)),
            )
        logger.info("Created Grok conversation %s", conversation_id)
        return self._conversation(conversation_id)

    async def get_conversation(self, conversation_id: str) -> GrokConversation:
        """Return an existing conversation with its history loaded."""

        conversation = self._conversation(conversation_id)
        await conversation.load_history()
        return conversation

    async def get_conversation_items(
        self, conversation_id: str
    ) -> list[dict[str, Any]]:
        """Fetch raw history items, most recent first."""

        params = {
            "variables": json.dumps({"restId": conversation_id}),
            "features": json.dumps(dict(GROK_CONVERSATION_ITEMS_FEATURES)),
        }
        data = await self._request_json(
            "get_conversation_items",
            "GET",
            Endpoint.GROK_CONVERSATION_ITEMS_BY_REST_ID,
            params=params,
        )
        container = ((data or {}).get("data") or {}).get(
            "grok_conversation_items_by_rest_id"
        )
        if not isinstance(container, dict):
            raise ProtocolError(
                "get_conversation_items",
                f"Missing conversation items for {conversation_id}: "
                + excerpt(json.dumps(data)),
            )
        items = container.get("items") or []
        if not isinstance(items, list):
            raise ProtocolError(
                "get_conversation_items", f"Unexpected items payload: {excerpt(items)}"
            )
        return items

    async def upload_attachment(
        self,
        source: AttachmentSource,
        filename: Optional[str] = None,
    ) -> AttachmentRef:
        """Upload a file (path or raw bytes) for use in a later message."""

        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
            name = filename or "image"
        else:
            path = Path(source)
            data = await asyncio.to_thread(path.read_bytes)
            name = filename or path.name

        # httpx sets the multipart boundary itself.
        headers = self._credentials.build_headers({"content-type": None})
        payload = await self._request_json(
            "upload_attachment",
            "POST",
            Endpoint.GROK_ATTACHMENT,
            headers=headers,
            files={"image": (name, data)},
        )
        if isinstance(payload, list) and len(payload) == 1:
            payload = payload[0]
        logger.debug("Uploaded attachment %s (%d bytes)", name, len(data))
        return attachment_from_wire(payload)

    async def add_response(
        self,
        responses: list[dict[str, Any]],
        conversation_id: str,
        model: str,
        image_generation_count: int,
    ) -> AsyncGenerator[bytes, None]:
        """Send a message and yield the raw response body chunk by chunk."""

        payload = build_add_response_payload(
            responses, conversation_id, model, image_generation_count
        )
        headers = self._credentials.build_headers(
            {
                "content-type": "text/plain;charset=UTF-8",
                "X-Client-Transaction-Id": str(uuid.uuid4()),
            }
        )

        client = await self._get_http_client()
        try:
            async with client.stream(
                "POST",
                Endpoint.GROK_ADD_RESPONSE,
                headers=headers,
                content=json.dumps(payload),
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    detail = self._extract_error_detail(body)
                    raise ProtocolError(
                        "add_response", detail, status_code=response.status_code
                    )
                no_body = response.status_code == 204
                if no_body or response.headers.get("content-length") == "0":
                    raise ProtocolError(
                        "add_response",
                        "Response body is null",
                        status_code=response.status_code,
                    )

                async for chunk in response.aiter_bytes():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as exc:
            raise ProtocolError("add_response", str(exc)) from exc

    async def get_image(self, url: str) -> bytes:
        """Fetch generated image bytes."""

        response = await self._request("get_image", "GET", url)
        return response.content

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "GrokClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @staticmethod
    def _extract_error_detail(raw: bytes) -> Any:
        if not raw:
            return "Grok returned an empty error response."
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="ignore")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return excerpt(text)
        if isinstance(payload, dict):
            return payload.get("errors") or payload.get("error") or payload
        return payload

    def __repr__(self) -> str:
        return f"<GrokClient lang={self._credentials.lang!r}>"


__all__ = ["AttachmentSource", "GrokClient"]
