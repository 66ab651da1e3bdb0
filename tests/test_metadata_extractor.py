"""Tests for metadata reply parsing and the extraction client."""

from __future__ import annotations

import json
from typing import List

import pytest

from core import FailureReason
from intelligence.llm import BaseLLM, DocumentPart, LLMResponse, Message, MessageRole, TextPart
from intelligence.tools.metadata_extractor import (
    MetadataExtractor,
    parse_article_reply,
    slice_json_object,
)


class _FakeLLM(BaseLLM):
    def __init__(self, reply: str = "", error: Exception = None):
        super().__init__(model="fake-model")
        self.reply = reply
        self.error = error
        self.calls: List[List[Message]] = []

    @property
    def provider(self) -> str:
        return "fake"

    async def acomplete(self, messages, **kwargs) -> LLMResponse:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model)


_RECORD = {
    "title": "X",
    "authors": ["Ada Lovelace", "Charles Babbage"],
    "abstract": "An abstract.",
    "release_year": 1843,
    "publisher": "Notes",
}


class TestReplyParsing:
    def test_recovers_object_from_fenced_commentary(self):
        reply = "Here you go: ```json " + json.dumps(_RECORD) + " ``` thanks!"
        result = parse_article_reply(reply)
        assert result.ok
        assert result.value["title"] == "X"
        assert result.value["release_year"] == 1843

    def test_slice_spans_first_open_to_last_close(self):
        assert slice_json_object('a {"x": {"y": 1}} b') == '{"x": {"y": 1}}'

    def test_no_braces_is_no_metadata(self):
        result = parse_article_reply("I could not find anything.")
        assert result.failure == FailureReason.NO_METADATA

    def test_close_before_open_is_no_metadata(self):
        assert slice_json_object("} nothing {") is None
        assert parse_article_reply("} nothing {").failure == FailureReason.NO_METADATA

    def test_invalid_json_after_slicing_is_no_metadata(self):
        result = parse_article_reply("{title: 'unquoted'}")
        assert result.failure == FailureReason.NO_METADATA

    def test_missing_or_blank_title_is_no_metadata(self):
        assert not parse_article_reply('{"title": null, "abstract": "a"}').ok
        assert not parse_article_reply('{"title": "  ", "abstract": "a"}').ok
        assert not parse_article_reply('{"abstract": "a"}').ok

    def test_release_date_is_accepted_as_release_year(self):
        result = parse_article_reply('{"title": "T", "release_date": "2021"}')
        assert result.value["release_year"] == "2021"


@pytest.mark.asyncio
async def test_extract_builds_normalized_record():
    llm = _FakeLLM(reply="```json\n" + json.dumps(_RECORD) + "\n```")
    extractor = MetadataExtractor(llm)

    result = await extractor.extract("article body", "https://example.com/paper")

    assert result.ok
    article = result.value
    assert article.title == "X"
    assert article.authors == ["Ada Lovelace", "Charles Babbage"]
    assert article.abstract_text == "An abstract."
    assert article.release_year == "1843"
    assert article.link == "https://example.com/paper"
    assert article.relevance is None

    messages = llm.calls[0]
    assert messages[0].role == MessageRole.SYSTEM
    assert messages[0].content == "/think"
    assert messages[1].content.endswith("article body")


@pytest.mark.asyncio
async def test_extract_normalizes_single_author_and_blank_fields():
    reply = '{"title": "T", "authors": "Solo Author", "abstract": "", "publisher": null}'
    extractor = MetadataExtractor(_FakeLLM(reply=reply))

    result = await extractor.extract("text", "https://example.com")

    assert result.value.authors == ["Solo Author"]
    assert result.value.abstract_text is None
    assert result.value.publisher is None


@pytest.mark.asyncio
async def test_llm_errors_become_no_metadata():
    extractor = MetadataExtractor(_FakeLLM(error=RuntimeError("rate limited")))

    result = await extractor.extract("text", "https://example.com")

    assert result.failure == FailureReason.NO_METADATA
    assert "rate limited" in result.detail


@pytest.mark.asyncio
async def test_empty_reply_is_no_metadata():
    extractor = MetadataExtractor(_FakeLLM(reply=""))
    result = await extractor.extract("text", "https://example.com")
    assert result.failure == FailureReason.NO_METADATA


@pytest.mark.asyncio
async def test_document_extraction_sends_text_and_document_parts():
    document_llm = _FakeLLM(reply=json.dumps(_RECORD))
    extractor = MetadataExtractor(_FakeLLM(), document_llm=document_llm)

    result = await extractor.extract_from_document(b"%PDF-not-really", "https://example.com/a.pdf")

    assert result.ok
    (message,) = document_llm.calls[0]
    text_part, document_part = message.content
    assert isinstance(text_part, TextPart)
    assert isinstance(document_part, DocumentPart)
    # untrimmable bytes are sent as they are
    assert document_part.data == b"%PDF-not-really"
    payload = message.to_dict()["content"][1]
    assert payload["type"] == "document"
    assert payload["source"]["media_type"] == "application/pdf"


@pytest.mark.asyncio
async def test_document_extraction_without_model_is_no_metadata():
    extractor = MetadataExtractor(_FakeLLM())
    assert extractor.supports_documents is False
    result = await extractor.extract_from_document(b"%PDF", "https://example.com/a.pdf")
    assert result.failure == FailureReason.NO_METADATA
