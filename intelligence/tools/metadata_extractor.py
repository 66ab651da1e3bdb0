"""
Metadata extraction through a chat model.

The model is asked for a bare JSON object; replies wrapped in commentary or
markdown fences are sliced to the outermost brace pair before parsing. A
reply that still does not parse is a final "no result" for that source.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from config import ExtractionSettings, LLMSettings
from core import FailureReason, StageResult
from intelligence.llm import BaseLLM, DocumentPart, Message, TextPart, get_llm
from models import ArticleRecord

from processing.extractor import trim_pdf_document


logger = logging.getLogger(__name__)

_SCHEMA_EXAMPLE = """{
  "title": "The Article Title",
  "authors": ["Author One", "Author Two"],
  "abstract": "The full abstract text...",
  "release_year": "The publication year",
  "publisher": "The journal or publisher name"
}"""

TEXT_EXTRACTION_PROMPT = (
    "You are a data extraction bot.\n"
    "Analyze the user-provided text from a scholarly article.\n"
    "Extract the title, authors, abstract, release date, and publisher.\n"
    "Respond ONLY with a valid JSON object matching this schema:\n"
    f"{_SCHEMA_EXAMPLE}\n"
    "If a field is not found, return null for that field.\n\n"
    "Here is the article text:\n"
)

DOCUMENT_EXTRACTION_PROMPT = (
    "You are a data extraction bot.\n"
    "Analyze the provided PDF document.\n"
    "Extract the title, all authors, the abstract, the release date, and the publisher.\n"
    "Respond ONLY with a valid JSON object matching this schema:\n"
    f"{_SCHEMA_EXAMPLE}\n"
    "If a field is not found, return null for that field."
)

_FIELD_ALIASES = {
    "release_date": "release_year",
    "year": "release_year",
    "abstract_text": "abstract",
}


def slice_json_object(content: str) -> Optional[str]:
    """Substring from the first ``{`` to the last ``}``, or None."""
    if not content:
        return None
    open_idx = content.find("{")
    close_idx = content.rfind("}")
    if open_idx == -1 or close_idx == -1 or open_idx >= close_idx:
        return None
    return content[open_idx:close_idx + 1]


def parse_article_reply(content: str) -> StageResult[Dict[str, Any]]:
    """
    Parse a metadata reply into a field dict.

    Fails with ``NO_METADATA`` when no brace pair is found, the slice is not
    a JSON object, or the object carries no title.
    """
    sliced = slice_json_object(content)
    if sliced is None:
        return StageResult.fail(FailureReason.NO_METADATA, "no JSON object in reply")

    try:
        payload = json.loads(sliced)
    except json.JSONDecodeError as exc:
        return StageResult.fail(FailureReason.NO_METADATA, f"invalid JSON: {exc}")

    if not isinstance(payload, dict):
        return StageResult.fail(FailureReason.NO_METADATA, "reply is not a JSON object")

    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        name = _FIELD_ALIASES.get(str(key).strip().lower(), str(key).strip().lower())
        if name not in fields or fields[name] is None:
            fields[name] = value

    title = fields.get("title")
    if not isinstance(title, str) or not title.strip():
        return StageResult.fail(FailureReason.NO_METADATA, "reply has no title")

    return StageResult.success(fields)


def build_article(fields: Dict[str, Any], link: str) -> ArticleRecord:
    """ArticleRecord from parsed fields; ``link`` always comes from the source URL."""
    return ArticleRecord(
        title=fields.get("title"),
        authors=fields.get("authors"),
        abstract_text=fields.get("abstract"),
        release_year=fields.get("release_year"),
        publisher=fields.get("publisher"),
        link=link,
    )


class MetadataExtractor:
    """
    Extracts bibliographic fields from article text, or from a PDF document
    when the document model is configured.
    """

    def __init__(
        self,
        llm: BaseLLM,
        document_llm: Optional[BaseLLM] = None,
        system_prompt: Optional[str] = "/think",
        pdf_max_pages: int = 3,
    ):
        self.llm = llm
        self.document_llm = document_llm
        self.system_prompt = system_prompt
        self.pdf_max_pages = pdf_max_pages

    @classmethod
    def from_settings(
        cls,
        llm_settings: LLMSettings,
        extraction_settings: Optional[ExtractionSettings] = None,
    ) -> "MetadataExtractor":
        llm = get_llm(
            provider=llm_settings.extraction_provider,
            model=llm_settings.extraction_model,
            settings=llm_settings,
            base_url=llm_settings.extraction_base_url,
            top_p=llm_settings.top_p,
        )
        document_llm = None
        if extraction_settings is not None and extraction_settings.document_fallback:
            document_llm = get_llm(
                provider="openai",
                model=llm_settings.document_model,
                settings=llm_settings,
                base_url=llm_settings.document_base_url,
            )
        return cls(
            llm=llm,
            document_llm=document_llm,
            system_prompt=llm_settings.extraction_system_prompt,
            pdf_max_pages=extraction_settings.pdf_max_pages if extraction_settings else 3,
        )

    @property
    def supports_documents(self) -> bool:
        return self.document_llm is not None

    async def _complete(self, llm: BaseLLM, messages: List[Message], link: str) -> StageResult[str]:
        try:
            response = await llm.acomplete(messages)
        except Exception as exc:
            logger.debug(f"Metadata call failed for {link}: {type(exc).__name__}: {exc}")
            return StageResult.fail(FailureReason.NO_METADATA, f"{type(exc).__name__}: {exc}")
        if not response.content:
            return StageResult.fail(FailureReason.NO_METADATA, "empty reply")
        return StageResult.success(response.content)

    def _to_article(self, reply: StageResult[str], link: str) -> StageResult[ArticleRecord]:
        if not reply.ok:
            return StageResult.fail(reply.failure, reply.detail)
        parsed = parse_article_reply(reply.value)
        if not parsed.ok:
            return StageResult.fail(parsed.failure, parsed.detail)
        return StageResult.success(build_article(parsed.value, link))

    async def extract(self, text: str, link: str) -> StageResult[ArticleRecord]:
        """Fields from bounded article text"""
        messages = []
        if self.system_prompt:
            messages.append(Message.system(self.system_prompt))
        messages.append(Message.user(TEXT_EXTRACTION_PROMPT + text))

        reply = await self._complete(self.llm, messages, link)
        return self._to_article(reply, link)

    async def extract_from_document(self, pdf_bytes: bytes, link: str) -> StageResult[ArticleRecord]:
        """Fields from the leading pages of a PDF sent as a document part"""
        if self.document_llm is None:
            return StageResult.fail(FailureReason.NO_METADATA, "document model not configured")

        document = trim_pdf_document(pdf_bytes, self.pdf_max_pages)
        messages = [
            Message.user([
                TextPart(DOCUMENT_EXTRACTION_PROMPT),
                DocumentPart(document),
            ])
        ]
        reply = await self._complete(self.document_llm, messages, link)
        return self._to_article(reply, link)

    async def aclose(self) -> None:
        await self.llm.aclose()
        if self.document_llm is not None:
            await self.document_llm.aclose()
