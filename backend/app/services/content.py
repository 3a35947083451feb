"""Content references for writings.

A writing's full text lives either on the upload CDN (plain URL) or inline
in the reference itself as ``data:text/plain;base64,<utf-8 text>`` when the
upload step was skipped. This module builds inline references and resolves
either kind back into text. Remote references are only fetched from the
configured upload hosts.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Iterable
from urllib.parse import unquote, urlsplit

import httpx

from app.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

INLINE_PREFIX = "data:text/plain;base64,"


def encode_inline(text: str) -> str:
    """Build an inline content reference for ``text``."""
    return INLINE_PREFIX + base64.b64encode(text.encode("utf-8")).decode("ascii")


def is_inline(reference: str) -> bool:
    return reference.startswith("data:")


def decode_inline(reference: str) -> str:
    """Decode a ``data:`` URL into text.

    Raises ValidationError when the reference is malformed.
    """
    header, sep, payload = reference.partition(",")
    if not sep or not header.startswith("data:"):
        raise ValidationError("Malformed inline content reference")

    params = header[len("data:"):].split(";")
    charset = "utf-8"
    for param in params[1:]:
        if param.lower().startswith("charset="):
            charset = param.split("=", 1)[1] or charset

    try:
        if "base64" in (p.lower() for p in params):
            raw = base64.b64decode(payload, validate=True)
        else:
            raw = unquote(payload).encode(charset)
        return raw.decode(charset)
    except (binascii.Error, UnicodeError, LookupError) as exc:
        raise ValidationError("Inline content could not be decoded") from exc


class ContentService:
    """Resolves content references; remote ones through a shared HTTP client.

    Remote fetches are limited to ``allowed_hosts`` (redirect targets
    included) and to ``max_bytes`` of body, read as a stream.
    """

    USER_AGENT = "Folio/0.1 (portfolio content fetcher)"
    MAX_REDIRECTS = 3

    def __init__(
        self,
        timeout: float = 10.0,
        max_bytes: int = 5 * 1024 * 1024,
        allowed_hosts: Iterable[str] = (),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._allowed_hosts = frozenset(h.strip().lower() for h in allowed_hosts if h.strip())
        # Redirects are followed by hand so every hop passes the host check
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=False,
            headers={"User-Agent": self.USER_AGENT},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the shared HTTP client."""
        await self._client.aclose()

    async def resolve(self, reference: str) -> tuple[str, str]:
        """Return ``(source, text)`` where source is "inline" or "remote"."""
        if is_inline(reference):
            return "inline", decode_inline(reference)
        return "remote", await self.fetch_remote(reference)

    def check_url(self, url: str) -> None:
        """Raise ValidationError unless ``url`` is http(s) on an allowed host."""
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValidationError("Unsupported content reference")
        if parts.hostname.lower() not in self._allowed_hosts:
            logger.warning("Refusing to fetch content from host %s", parts.hostname)
            raise ValidationError("Content host is not allowed")

    async def fetch_remote(self, url: str) -> str:
        for _ in range(self.MAX_REDIRECTS + 1):
            self.check_url(url)
            try:
                async with self._client.stream("GET", url) as response:
                    if response.is_redirect:
                        url = str(response.url.join(response.headers["location"]))
                        continue
                    response.raise_for_status()
                    body = await self._read_limited(response)
                    encoding = response.encoding or "utf-8"
            except httpx.HTTPError as exc:
                logger.warning("Fetching content from %s failed", url, exc_info=True)
                raise UpstreamError("Failed to fetch content") from exc
            try:
                return body.decode(encoding, errors="replace")
            except LookupError:
                return body.decode("utf-8", errors="replace")
        raise UpstreamError("Too many redirects")

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self._max_bytes:
            raise UpstreamError("Content exceeds size limit")

        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self._max_bytes:
                raise UpstreamError("Content exceeds size limit")
            chunks.append(chunk)
        return b"".join(chunks)
