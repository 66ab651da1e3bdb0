"""
Content extraction: reduce fetched HTML/PDF payloads to bounded plain text.

HTML keeps the main semantic container only; PDFs are trimmed to their
leading pages before text extraction to bound the cost on large files.
"""

from __future__ import annotations

from io import BytesIO
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from pypdf import PdfReader, PdfWriter

from config import ExtractionSettings
from core import ExtractedText, FailureReason, FetchedContent, StageResult
from models import SourceKind


logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 10000
PDF_MAX_PAGES = 3
PAGE_SEPARATOR = "\n\n"

# Order of preference for the main content container
_CONTENT_SELECTORS = (
    "article, [role='article']",
    "main",
    "[role='main']",
)
_NON_VISIBLE_TAGS = ("script", "style", "noscript", "template", "svg", "head")

_BLANK_LINES = re.compile(r"\n\s*\n+")
_INLINE_SPACE = re.compile(r"[ \t\f\v\r]+")


def truncate_text(text: str, max_chars: int = MAX_TEXT_CHARS) -> str:
    """Keep the first ``max_chars`` characters, no boundary alignment."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def _normalize_whitespace(text: str) -> str:
    text = _INLINE_SPACE.sub(" ", text)
    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(lines)
    return _BLANK_LINES.sub("\n\n", text).strip()


def extract_html_text(html: str) -> str:
    """Visible text of the main content element, or of the whole body."""
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(list(_NON_VISIBLE_TAGS)):
        tag.decompose()

    node = None
    for selector in _CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            break
    if node is None:
        node = soup.body or soup

    return _normalize_whitespace(node.get_text("\n", strip=True))


def _trim_pdf(pdf_bytes: bytes, max_pages: int) -> bytes:
    """Copy the first ``max_pages`` pages into a new minimal document."""
    reader = PdfReader(BytesIO(pdf_bytes))
    writer = PdfWriter()
    for page in reader.pages[:max_pages]:
        writer.add_page(page)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _pages_text(reader: PdfReader, *, max_pages: Optional[int], max_chars: int) -> str:
    pages: List[str] = []
    total = 0
    for idx, page in enumerate(reader.pages):
        if max_pages is not None and idx >= max_pages:
            break
        try:
            text = page.extract_text() or ""
        except Exception as exc:
            logger.debug(f"PDF page {idx} text extraction failed: {exc}")
            text = ""
        text = text.strip()
        if text:
            pages.append(text)
            total += len(text)
        # The caller truncates anyway; stop reading once the cap is covered
        if total >= max_chars:
            break
    return PAGE_SEPARATOR.join(pages)


def extract_pdf_text(
    pdf_bytes: bytes,
    *,
    max_pages: int = PDF_MAX_PAGES,
    max_chars: int = MAX_TEXT_CHARS,
) -> str:
    """Text of the leading ``max_pages`` pages, page texts joined by a blank line.

    Falls back to reading the original bytes when trimming fails.

    Raises:
        pypdf errors when the original bytes cannot be parsed either.
    """
    if not pdf_bytes:
        return ""
    try:
        trimmed = _trim_pdf(pdf_bytes, max_pages)
        reader = PdfReader(BytesIO(trimmed))
        return _pages_text(reader, max_pages=None, max_chars=max_chars)
    except Exception as exc:
        logger.debug(f"PDF page trimming failed, reading original document: {exc}")

    reader = PdfReader(BytesIO(pdf_bytes))
    return _pages_text(reader, max_pages=max_pages, max_chars=max_chars)


def trim_pdf_document(pdf_bytes: bytes, max_pages: int = PDF_MAX_PAGES) -> bytes:
    """Leading pages as a standalone PDF, or the original bytes if trimming fails."""
    try:
        return _trim_pdf(pdf_bytes, max_pages)
    except Exception as exc:
        logger.debug(f"PDF trimming failed, keeping original document: {exc}")
        return pdf_bytes


class ContentExtractor:
    """
    Turns ``FetchedContent`` into ``ExtractedText`` bounded to ``max_chars``.
    """

    def __init__(self, max_chars: int = MAX_TEXT_CHARS, pdf_max_pages: int = PDF_MAX_PAGES):
        self.max_chars = max(1, int(max_chars))
        self.pdf_max_pages = max(1, int(pdf_max_pages))

    @classmethod
    def from_settings(cls, settings: ExtractionSettings) -> "ContentExtractor":
        return cls(max_chars=settings.max_chars, pdf_max_pages=settings.pdf_max_pages)

    def extract(self, content: FetchedContent) -> StageResult[ExtractedText]:
        try:
            if content.kind == SourceKind.PDF:
                text = extract_pdf_text(
                    content.data,
                    max_pages=self.pdf_max_pages,
                    max_chars=self.max_chars,
                )
            else:
                html = content.text or content.data.decode("utf-8", errors="replace")
                text = extract_html_text(html)
        except Exception as exc:
            return StageResult.fail(FailureReason.EXTRACTION_FAILED, f"{type(exc).__name__}: {exc}")

        bounded = truncate_text(text, self.max_chars)
        return StageResult.success(
            ExtractedText(
                text=bounded,
                source_kind=content.kind,
                truncated=len(bounded) < len(text),
            )
        )
