"""Cookie parsing and request header construction."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .constants import GUEST_BEARER_TOKEN
from .errors import ConfigurationError, MissingCredentialError

logger = logging.getLogger(__name__)

CookieSource = Union[str, Path, Mapping[str, Any], None]

_CSRF_PATTERN = re.compile(r"(?:^|;\s*)ct0=([a-f0-9]+)")


def _cookie_mapping_to_string(cookies: Mapping[str, Any]) -> str:
    return "; ".join(f"{key}={value}" for key, value in cookies.items())


def _load_cookie_file(path: Path) -> str:
    """Read a JSON cookie file saved as a mapping or a browser export list."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError("load_cookies", f"{path}: {exc}") from exc

    if isinstance(payload, dict):
        return _cookie_mapping_to_string(payload)
    if isinstance(payload, list):
        pairs: dict[str, Any] = {}
        for entry in payload:
            if isinstance(entry, dict) and "name" in entry and "value" in entry:
                pairs[str(entry["name"])] = entry["value"]
        return _cookie_mapping_to_string(pairs)
    raise ConfigurationError(
        "load_cookies", f"{path}: expected a JSON object or list of cookies"
    )


def parse_cookies(cookies: CookieSource) -> str:
    """Normalise the supported cookie inputs into a single header string."""

    if cookies is None:
        return ""
    if isinstance(cookies, Path):
        return _load_cookie_file(cookies)
    if isinstance(cookies, str):
        return cookies.strip()
    return _cookie_mapping_to_string(cookies)


def extract_csrf_token(cookie: str) -> str:
    match = _CSRF_PATTERN.search(cookie)
    return match.group(1) if match else ""


class CredentialProvider:
    """Compute the stable header set sent with every request.

    The headers are derived once; a missing ``ct0`` cookie is fatal because
    every endpoint rejects requests without the matching CSRF header.
    """

    __slots__ = ("_cookie", "_csrf_token", "_lang", "_headers")

    def __init__(self, cookies: CookieSource = None, *, lang: str = "en-US") -> None:
        self._cookie = parse_cookies(cookies)
        self._csrf_token = extract_csrf_token(self._cookie)
        self._lang = lang

        if not self._csrf_token:
            raise MissingCredentialError(
                "init",
                'Failed to find "ct0" cookie, which is required for the CSRF token.',
            )

        self._headers: Mapping[str, str] = MappingProxyType(
            {
                "authorization": f"Bearer {GUEST_BEARER_TOKEN}",
                "content-type": "application/json",
                "cookie": self._cookie,
                "x-csrf-token": self._csrf_token,
                "x-twitter-active-user": "yes",
                "x-twitter-client-language": self._lang,
            }
        )
        logger.debug("Credential headers prepared (lang=%s)", self._lang)

    @classmethod
    def from_settings(
        cls, settings: Any, *, lang: Optional[str] = None
    ) -> "CredentialProvider":
        cookies: CookieSource = None
        if settings.cookies is not None:
            cookies = settings.cookies.get_secret_value()
        elif settings.cookies_file is not None:
            cookies = Path(settings.cookies_file)
        return cls(cookies, lang=lang or settings.lang)

    @property
    def csrf_token(self) -> str:
        return self._csrf_token

    @property
    def lang(self) -> str:
        return self._lang

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    def build_headers(
        self,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
    ) -> dict[str, str]:
        """Return a fresh header dict; ``None`` override values drop a header."""

        headers = dict(self._headers)
        for key, value in (overrides or {}).items():
            if value is None:
                headers.pop(key, None)
            else:
                headers[key] = value
        return headers

    def __repr__(self) -> str:
        return f"<CredentialProvider lang={self._lang!r}>"


__all__ = [
    "CookieSource",
    "CredentialProvider",
    "extract_csrf_token",
    "parse_cookies",
]
