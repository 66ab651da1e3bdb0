"""
Utils Module
"""
from .logger import setup_logger
from .exceptions import (
    ThesisSourcerError,
    ConfigurationError,
    EmbeddingError,
    EmbeddingDimensionError,
    LLMError,
    UpstreamError,
)

__all__ = [
    "setup_logger",
    "ThesisSourcerError",
    "ConfigurationError",
    "EmbeddingError",
    "EmbeddingDimensionError",
    "LLMError",
    "UpstreamError",
]
