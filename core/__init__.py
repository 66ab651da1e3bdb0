"""Core contracts shared by the sourcing pipeline stages."""

from .contracts import (
    ExtractedText,
    FailureReason,
    FetchedContent,
    StageResult,
    WorkerOutcome,
)

__all__ = [
    "ExtractedText",
    "FailureReason",
    "FetchedContent",
    "StageResult",
    "WorkerOutcome",
]
