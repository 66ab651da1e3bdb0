"""
Data Models
"""
from .schemas import (
    SourceKind,
    CandidateSource,
    ArticleRecord,
    ThesisRequest,
)

__all__ = [
    "SourceKind",
    "CandidateSource",
    "ArticleRecord",
    "ThesisRequest",
]
