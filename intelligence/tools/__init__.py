"""
Agent Tools
Keyword generation and metadata extraction backed by chat models
"""
from .keyword_generator import KeywordGenerator
from .metadata_extractor import (
    MetadataExtractor,
    parse_article_reply,
    slice_json_object,
)

__all__ = [
    # Keywords
    "KeywordGenerator",
    # Metadata
    "MetadataExtractor",
    "parse_article_reply",
    "slice_json_object",
]
