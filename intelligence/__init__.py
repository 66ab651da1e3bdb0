"""
Intelligence Module
LLM abstraction, LLM-backed tools and the sourcing pipeline
"""
from .llm import (
    BaseLLM,
    OpenAILLM,
    GeminiLLM,
    get_llm,
)
from .tools import KeywordGenerator, MetadataExtractor
from .pipeline import SourcingPipeline

__all__ = [
    # LLM
    "BaseLLM",
    "OpenAILLM",
    "GeminiLLM",
    "get_llm",
    # Tools
    "KeywordGenerator",
    "MetadataExtractor",
    # Pipeline
    "SourcingPipeline",
]
