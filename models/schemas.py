"""
Data Models / Schemas
Records exchanged with callers of the sourcing service.
"""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceKind(str, Enum):
    """Content type of a fetched source"""
    HTML = "html"
    PDF = "pdf"


class CandidateSource(BaseModel):
    """A URL believed to hold a relevant article"""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Source URL")


class ArticleRecord(BaseModel):
    """Bibliographic record extracted from one source"""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, description="Article title")
    authors: List[str] = Field(default_factory=list, description="Authors in byline order")
    abstract_text: Optional[str] = Field(None, alias="abstract", description="Abstract")
    release_year: Optional[str] = Field(None, description="Publication year")
    publisher: Optional[str] = Field(None, description="Journal or publisher")
    link: str = Field(..., description="Source URL")
    relevance: Optional[float] = Field(None, description="Relevance to the thesis, 0-100")

    @field_validator("title", "abstract_text", "release_year", "publisher", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            value = str(value)
        if not isinstance(value, str):
            return None
        text = value.strip()
        return text or None

    @field_validator("authors", mode="before")
    @classmethod
    def _coerce_authors(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        authors: List[str] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                authors.append(item.strip())
        return authors


class ThesisRequest(BaseModel):
    """Body of the article search endpoint"""
    thesis: str = Field(..., description="Free-text research thesis")

    @field_validator("thesis")
    @classmethod
    def _validate_thesis(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("thesis must not be empty")
        return text
