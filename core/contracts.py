"""Stage contracts for the per-source worker chain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from models import ArticleRecord, SourceKind


T = TypeVar("T")


class FailureReason(str, Enum):
    """Why a worker produced nothing."""

    FETCH_FAILED = "fetch_failed"
    NOT_PDF = "not_pdf"
    EXTRACTION_FAILED = "extraction_failed"
    LOW_QUALITY = "low_quality"
    NO_METADATA = "no_metadata"
    MISSING_ABSTRACT = "missing_abstract"
    EMBEDDING_FAILED = "embedding_failed"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of one stage: a value, or a typed failure reason."""

    value: Optional[T] = None
    failure: Optional[FailureReason] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None and self.value is not None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, reason: FailureReason, detail: str = "") -> "StageResult[T]":
        return cls(failure=reason, detail=detail)


@dataclass(frozen=True)
class FetchedContent:
    """Raw payload of a source. HTML bodies are also kept decoded in ``text``."""

    url: str
    kind: SourceKind
    data: bytes = b""
    text: str = ""


@dataclass(frozen=True)
class ExtractedText:
    """Visible text of a source, already bounded to the extraction cap."""

    text: str
    source_kind: SourceKind
    truncated: bool = False


@dataclass
class WorkerOutcome:
    """What one worker hands back to the orchestrator."""

    url: str
    article: Optional[ArticleRecord] = None
    failure: Optional[FailureReason] = None
    detail: str = ""

    @property
    def produced(self) -> bool:
        return self.article is not None and self.article.relevance is not None

    @classmethod
    def dropped(cls, url: str, reason: FailureReason, detail: str = "") -> "WorkerOutcome":
        return cls(url=url, failure=reason, detail=detail)
