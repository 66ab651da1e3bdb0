"""
Content Fetcher
Downloads one candidate source as HTML text or PDF bytes.
"""
from typing import Optional
from urllib.parse import urlsplit
import logging

import httpx

from config import FetchSettings
from core import FailureReason, FetchedContent, StageResult
from models import SourceKind

from .base import build_http_client


logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
_PDF_URL_TOKENS = ("pdf", "download")
DEFAULT_MAX_HTML_BYTES = 2_000_000


def is_pdf_candidate(url: str) -> bool:
    """True when the URL path or query mentions "pdf" or "download"."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    haystack = f"{parts.path}?{parts.query}".lower()
    return any(token in haystack for token in _PDF_URL_TOKENS)


def media_type(content_type: Optional[str]) -> str:
    """``text/html; charset=utf-8`` -> ``text/html``"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class ContentFetcher:
    """
    Fetches candidate sources over a shared ``httpx.AsyncClient``.

    Every transport or protocol error becomes a failed ``StageResult``;
    nothing raised by httpx escapes ``fetch``. HTML bodies are streamed and
    cut at ``max_html_bytes``.
    """

    def __init__(self, client: httpx.AsyncClient, max_html_bytes: int = DEFAULT_MAX_HTML_BYTES):
        self.client = client
        self.max_html_bytes = max_html_bytes

    @classmethod
    def from_settings(
        cls,
        settings: FetchSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ContentFetcher":
        return cls(
            build_http_client(settings, transport=transport),
            max_html_bytes=settings.max_html_bytes,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch(self, url: str) -> StageResult[FetchedContent]:
        if is_pdf_candidate(url):
            return await self._fetch_pdf(url)
        return await self._fetch_html(url)

    async def _fetch_pdf(self, url: str) -> StageResult[FetchedContent]:
        try:
            response = await self.client.get(url, headers={"Accept": PDF_MEDIA_TYPE})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return StageResult.fail(FailureReason.FETCH_FAILED, f"{type(exc).__name__}: {exc}")

        if response.status_code != 200:
            return StageResult.fail(FailureReason.FETCH_FAILED, f"HTTP {response.status_code}")

        received = media_type(response.headers.get("content-type"))
        if received != PDF_MEDIA_TYPE:
            return StageResult.fail(FailureReason.NOT_PDF, f"content-type {received or 'missing'}")

        return StageResult.success(
            FetchedContent(url=url, kind=SourceKind.PDF, data=response.content)
        )

    async def _fetch_html(self, url: str) -> StageResult[FetchedContent]:
        try:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                data = await self._read_capped(response, url)
                encoding = response.charset_encoding or "utf-8"
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return StageResult.fail(FailureReason.FETCH_FAILED, f"{type(exc).__name__}: {exc}")

        try:
            text = data.decode(encoding, errors="replace")
        except LookupError:
            text = data.decode("utf-8", errors="replace")

        return StageResult.success(
            FetchedContent(url=url, kind=SourceKind.HTML, data=data, text=text)
        )

    async def _read_capped(self, response: httpx.Response, url: str) -> bytes:
        buffer = bytearray()
        async for chunk in response.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) >= self.max_html_bytes:
                logger.debug(f"HTML body of {url} cut at {self.max_html_bytes} bytes")
                break
        return bytes(buffer[:self.max_html_bytes])
