"""Tests for the LLM abstraction and factory."""

from __future__ import annotations

import base64

import pytest

from config import LLMSettings
from intelligence.llm import DocumentPart, GeminiLLM, Message, OpenAILLM, TextPart, get_llm
from utils.exceptions import ConfigurationError, LLMError


def test_text_and_document_parts_serialize_as_tagged_union():
    message = Message.user([TextPart("Extract the fields"), DocumentPart(b"%PDF-1.4")])

    payload = message.to_dict()

    assert payload["role"] == "user"
    assert payload["content"][0] == {"type": "text", "text": "Extract the fields"}
    document = payload["content"][1]
    assert document["type"] == "document"
    assert document["source"]["type"] == "base64"
    assert base64.b64decode(document["source"]["data"]) == b"%PDF-1.4"
    assert message.text == "Extract the fields"


def test_factory_picks_gateway_key_from_base_url():
    settings = LLMSettings(openrouter_api_key="or-key", nvidia_api_key="nv-key", openai_api_key="oa-key")

    extraction = get_llm(
        provider="openai",
        model="nvidia/nemotron-nano-9b-v2",
        settings=settings,
        base_url="https://openrouter.ai/api/v1",
    )
    document = get_llm(
        provider="openai",
        model="nvidia/nemotron-parse",
        settings=settings,
        base_url="https://integrate.api.nvidia.com/v1",
    )
    plain = get_llm(provider="openai", settings=settings)

    assert isinstance(extraction, OpenAILLM)
    assert extraction.api_key == "or-key"
    assert extraction.temperature == 0.6
    assert extraction.max_tokens == 2048
    assert document.api_key == "nv-key"
    assert plain.api_key == "oa-key"


def test_factory_builds_gemini_for_keywords():
    llm = get_llm(provider="gemini", settings=LLMSettings(gemini_api_key="g-key"), top_p=0.9)
    assert isinstance(llm, GeminiLLM)
    assert llm.model == "gemini-2.0-flash"


def test_missing_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        get_llm(provider="gemini", settings=LLMSettings())


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        get_llm(provider="nope", settings=LLMSettings(), api_key="k")


@pytest.mark.asyncio
async def test_openai_errors_are_wrapped(monkeypatch):
    class _FailingCompletions:
        async def create(self, **kwargs):
            raise RuntimeError("gateway timeout")

    class _FailingClient:
        class chat:
            completions = _FailingCompletions()

    llm = OpenAILLM(api_key="k")
    monkeypatch.setattr(llm, "_get_async_client", lambda: _FailingClient())

    with pytest.raises(LLMError) as exc_info:
        await llm.acomplete([Message.user("hi")])
    assert exc_info.value.provider == "openai"
