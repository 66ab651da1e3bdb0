"""
Keyword Generator
Turns a thesis into a short search query with a chat model.
"""
import logging

from config import LLMSettings
from intelligence.llm import BaseLLM, get_llm
from utils.exceptions import UpstreamError


logger = logging.getLogger(__name__)

KEYWORD_PROMPT = (
    "Read the research thesis below and return 2-3 comma-separated keyword "
    "phrases suitable for a scholarly search engine. Respond with the keyword "
    "phrases only, with no numbering, quotes or explanation.\n\n"
    "Thesis:\n"
)


class KeywordGenerator:
    """
    The reply is used verbatim as the search query; only surrounding
    whitespace is removed.
    """

    def __init__(self, llm: BaseLLM):
        self.llm = llm

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> "KeywordGenerator":
        return cls(
            get_llm(
                provider=settings.keyword_provider,
                model=settings.keyword_model,
                settings=settings,
            )
        )

    async def generate(self, thesis: str) -> str:
        """
        Raises:
            UpstreamError: the model call failed or returned nothing
        """
        try:
            reply = await self.llm.achat(KEYWORD_PROMPT + thesis.strip())
        except Exception as e:
            raise UpstreamError(
                f"Keyword generation failed: {e}",
                stage="keywords",
                provider=getattr(self.llm, "provider", None),
            ) from e

        keywords = (reply or "").strip()
        if not keywords:
            raise UpstreamError("Keyword generation returned an empty reply", stage="keywords")

        logger.info(f"Search keywords: {keywords}")
        return keywords

    async def aclose(self) -> None:
        await self.llm.aclose()
