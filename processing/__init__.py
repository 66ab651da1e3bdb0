"""
Processing Module
Extraction, quality filtering, embedding and scoring
"""
from .extractor import (
    ContentExtractor,
    extract_html_text,
    extract_pdf_text,
    trim_pdf_document,
    truncate_text,
)
from .quality_gate import QualityGate
from .embedder import (
    BaseEmbedder,
    NvidiaEmbedder,
    OpenAIEmbedder,
    get_embedder,
)
from .scoring import cosine_similarity, rank_articles, relevance_score

__all__ = [
    # Extractor
    "ContentExtractor",
    "extract_html_text",
    "extract_pdf_text",
    "trim_pdf_document",
    "truncate_text",
    # Quality gate
    "QualityGate",
    # Embedder
    "BaseEmbedder",
    "NvidiaEmbedder",
    "OpenAIEmbedder",
    "get_embedder",
    # Scoring
    "cosine_similarity",
    "rank_articles",
    "relevance_score",
]
