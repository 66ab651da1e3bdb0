"""Tests for candidate source fetching."""

from __future__ import annotations

import httpx
import pytest

from config import FetchSettings
from core import FailureReason
from models import SourceKind
from scrapers.content_fetcher import ContentFetcher, is_pdf_candidate, media_type


def _fetcher(handler) -> ContentFetcher:
    return ContentFetcher.from_settings(FetchSettings(), transport=httpx.MockTransport(handler))


def test_pdf_candidate_classification():
    assert is_pdf_candidate("https://example.com/papers/paper.PDF")
    assert is_pdf_candidate("https://example.com/get?format=pdf")
    assert is_pdf_candidate("https://example.com/Download/123")
    assert not is_pdf_candidate("https://example.com/articles/123")
    # host names are not part of the classification
    assert not is_pdf_candidate("https://pdfhost.example.com/articles/123")


def test_media_type_strips_parameters():
    assert media_type("Application/PDF; charset=binary") == "application/pdf"
    assert media_type(None) == ""


@pytest.mark.asyncio
async def test_pdf_fetch_sends_pdf_accept_and_returns_bytes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["accept"] = request.headers.get("accept")
        seen["user_agent"] = request.headers.get("user-agent")
        return httpx.Response(200, headers={"content-type": "application/pdf"}, content=b"%PDF-1.7")

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/paper.pdf")
    finally:
        await fetcher.aclose()

    assert result.ok
    assert result.value.kind == SourceKind.PDF
    assert result.value.data == b"%PDF-1.7"
    assert seen["accept"] == "application/pdf"
    assert seen["user_agent"] == FetchSettings().user_agent


@pytest.mark.asyncio
async def test_pdf_fetch_rejects_other_content_types():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/html"}, text="<html>login</html>")

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/download/42")
    finally:
        await fetcher.aclose()

    assert not result.ok
    assert result.failure == FailureReason.NOT_PDF


@pytest.mark.asyncio
async def test_pdf_fetch_rejects_non_200():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, headers={"content-type": "application/pdf"})

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/paper.pdf")
    finally:
        await fetcher.aclose()

    assert result.failure == FailureReason.FETCH_FAILED


@pytest.mark.asyncio
async def test_html_fetch_returns_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/html"}, text="<main>Hello</main>")

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/article/1")
    finally:
        await fetcher.aclose()

    assert result.ok
    assert result.value.kind == SourceKind.HTML
    assert result.value.text == "<main>Hello</main>"


@pytest.mark.asyncio
async def test_html_error_status_is_fetch_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/article/1")
    finally:
        await fetcher.aclose()

    assert result.failure == FailureReason.FETCH_FAILED


@pytest.mark.asyncio
async def test_network_errors_never_escape():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    fetcher = _fetcher(handler)
    try:
        html_result = await fetcher.fetch("https://example.com/article/1")
        pdf_result = await fetcher.fetch("https://example.com/paper.pdf")
    finally:
        await fetcher.aclose()

    assert html_result.failure == FailureReason.FETCH_FAILED
    assert pdf_result.failure == FailureReason.FETCH_FAILED
    assert "ConnectTimeout" in html_result.detail



@pytest.mark.asyncio
async def test_html_body_is_cut_at_the_byte_limit():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/html"}, content=b"<p>" + b"x" * 5000)

    fetcher = ContentFetcher.from_settings(
        FetchSettings(max_html_bytes=1024),
        transport=httpx.MockTransport(handler),
    )
    try:
        result = await fetcher.fetch("https://example.com/article/huge")
    finally:
        await fetcher.aclose()

    assert result.ok
    assert len(result.value.data) == 1024
    assert result.value.text.startswith("<p>xxx")
    assert len(result.value.text) == 1024


@pytest.mark.asyncio
async def test_html_is_decoded_with_the_declared_charset():
    body = "<main>Café culture</main>".encode("latin-1")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/html; charset=latin-1"}, content=body)

    fetcher = _fetcher(handler)
    try:
        result = await fetcher.fetch("https://example.com/article/2")
    finally:
        await fetcher.aclose()

    assert result.value.text == "<main>Café culture</main>"
