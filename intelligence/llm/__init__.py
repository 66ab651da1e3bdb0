"""
LLM Module
Multi-provider LLM abstraction
"""
from .base import (
    BaseLLM,
    ContentPart,
    DocumentPart,
    LLMResponse,
    Message,
    MessageRole,
    TextPart,
)
from .openai_llm import OpenAILLM
from .gemini_llm import GeminiLLM
from .factory import get_llm

__all__ = [
    "BaseLLM",
    "ContentPart",
    "DocumentPart",
    "LLMResponse",
    "Message",
    "MessageRole",
    "TextPart",
    "OpenAILLM",
    "GeminiLLM",
    "get_llm",
]
