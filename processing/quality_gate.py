"""
Quality Gate
Cheap pre-filter that rejects block pages before any paid extraction call.
"""
from typing import Iterable, Optional, Tuple

from config import ExtractionSettings
from config.settings import DEFAULT_BLOCK_PHRASES


MIN_CONTENT_CHARS = 200


class QualityGate:
    """
    Rejects text that is blank, too short, or carries a block/paywall/cookie-wall
    signature. Phrase matching is case-insensitive substring matching.
    """

    def __init__(
        self,
        min_chars: int = MIN_CONTENT_CHARS,
        block_phrases: Optional[Iterable[str]] = None,
    ):
        self.min_chars = max(0, int(min_chars))
        phrases = DEFAULT_BLOCK_PHRASES if block_phrases is None else block_phrases
        self.block_phrases: Tuple[str, ...] = tuple(
            p.strip().lower() for p in phrases if p and p.strip()
        )

    @classmethod
    def from_settings(cls, settings: ExtractionSettings) -> "QualityGate":
        return cls(min_chars=settings.min_chars, block_phrases=settings.block_phrases)

    def matched_phrase(self, text: str) -> Optional[str]:
        """First block phrase found in the text, if any"""
        lowered = (text or "").lower()
        for phrase in self.block_phrases:
            if phrase in lowered:
                return phrase
        return None

    def passes(self, text: str) -> bool:
        """True when the text is worth sending to metadata extraction"""
        text = text or ""
        # length counts the text as extracted, surrounding whitespace included
        if not text.strip() or len(text) < self.min_chars:
            return False
        return self.matched_phrase(text) is None
