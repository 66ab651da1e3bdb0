"""
Sourcing Pipeline
thesis -> (thesis embedding || keywords) -> search scrape -> bounded
per-source workers -> top-K ranking
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import logging

from config import Settings, get_settings
from core import FailureReason, WorkerOutcome
from intelligence.tools.keyword_generator import KeywordGenerator
from intelligence.tools.metadata_extractor import MetadataExtractor
from models import ArticleRecord, SourceKind
from processing.embedder import BaseEmbedder, get_embedder
from processing.extractor import ContentExtractor
from processing.quality_gate import QualityGate
from processing.scoring import rank_articles, relevance_score
from scrapers.base import BaseScraper
from scrapers.content_fetcher import ContentFetcher
from scrapers.scholar_scraper import ScholarScraper
from utils.exceptions import EmbeddingDimensionError, EmbeddingError, UpstreamError


logger = logging.getLogger(__name__)

FetcherFactory = Callable[[], ContentFetcher]


class SourcingPipeline:
    """
    Orchestrates one thesis request end to end.

    Collaborators are injected so each stage can be replaced in tests; the
    settings value is never mutated after construction.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        keyword_generator: KeywordGenerator,
        scraper: BaseScraper,
        embedder: BaseEmbedder,
        metadata_extractor: MetadataExtractor,
        quality_gate: Optional[QualityGate] = None,
        extractor: Optional[ContentExtractor] = None,
        fetcher_factory: Optional[FetcherFactory] = None,
    ):
        self.settings = settings
        self.keyword_generator = keyword_generator
        self.scraper = scraper
        self.embedder = embedder
        self.metadata_extractor = metadata_extractor
        self.quality_gate = quality_gate or QualityGate.from_settings(settings.extraction)
        self.extractor = extractor or ContentExtractor.from_settings(settings.extraction)
        self._fetcher_factory = fetcher_factory or (
            lambda: ContentFetcher.from_settings(settings.fetch)
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SourcingPipeline":
        settings = settings or get_settings()
        return cls(
            settings,
            keyword_generator=KeywordGenerator.from_settings(settings.llm),
            scraper=ScholarScraper(settings.scholar, settings.fetch),
            embedder=get_embedder(settings.embedding),
            metadata_extractor=MetadataExtractor.from_settings(settings.llm, settings.extraction),
        )

    # ------------------------------------------------------------------
    # Request-level stages
    # ------------------------------------------------------------------

    async def _embed_thesis(self, thesis: str) -> List[float]:
        try:
            vector = await self.embedder.aembed_query(thesis)
        except Exception as e:
            raise UpstreamError(f"Thesis embedding failed: {e}", stage="thesis_embedding") from e
        if not vector:
            raise UpstreamError("Thesis embedding is empty", stage="thesis_embedding")
        return vector

    async def prepare(self, thesis: str) -> Tuple[List[float], str]:
        """
        Thesis embedding and search keywords, requested concurrently.

        Raises:
            UpstreamError: either call failed
        """
        embedding, keywords = await asyncio.gather(
            self._embed_thesis(thesis),
            self.keyword_generator.generate(thesis),
            return_exceptions=True,
        )
        for result, stage in ((embedding, "thesis_embedding"), (keywords, "keywords")):
            if isinstance(result, UpstreamError):
                raise result
            if isinstance(result, BaseException):
                raise UpstreamError(f"{stage} failed: {result}", stage=stage) from result
        return embedding, keywords

    async def run_with_summary(
        self,
        thesis: str,
        top_k: Optional[int] = None,
    ) -> Tuple[List[ArticleRecord], Dict[str, Any]]:
        thesis = (thesis or "").strip()
        if not thesis:
            raise ValueError("thesis must not be empty")

        embedding, keywords = await self.prepare(thesis)
        urls = await self.scraper.search(keywords, self.settings.scholar.max_results)
        logger.info(f"Scraped {len(urls)} candidate sources for '{keywords}'")

        articles, summary = await self.rank_sources(embedding, urls, top_k=top_k)
        summary["keywords"] = keywords
        return articles, summary

    async def run(self, thesis: str, top_k: Optional[int] = None) -> List[ArticleRecord]:
        """Ranked articles for a thesis; an empty list is a valid result."""
        articles, _ = await self.run_with_summary(thesis, top_k=top_k)
        return articles

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def rank_sources(
        self,
        thesis_embedding: Sequence[float],
        urls: Sequence[str],
        top_k: Optional[int] = None,
    ) -> Tuple[List[ArticleRecord], Dict[str, Any]]:
        """
        Process every candidate under the concurrency cap and rank the survivors.

        Workers still running when the request deadline expires are cancelled;
        whatever finished is ranked.

        Raises:
            EmbeddingDimensionError: thesis and passage embeddings disagree
        """
        pipeline_settings = self.settings.pipeline
        top_k = pipeline_settings.top_k if top_k is None else top_k
        semaphore = asyncio.Semaphore(pipeline_settings.concurrency)
        deadline = pipeline_settings.request_deadline_sec or None

        outcomes: List[WorkerOutcome] = []
        timed_out = 0

        fetcher = self._fetcher_factory()
        tasks: List[asyncio.Task] = []
        try:
            async def _worker(url: str) -> None:
                async with semaphore:
                    try:
                        outcome = await self.process_source(fetcher, thesis_embedding, url)
                    except EmbeddingDimensionError:
                        raise
                    except Exception as exc:
                        logger.warning(f"Worker for {url} failed unexpectedly: {type(exc).__name__}: {exc}")
                        outcome = WorkerOutcome.dropped(url, FailureReason.UNEXPECTED, str(exc))
                # completion order, so equal scores keep it after the stable sort
                outcomes.append(outcome)

            tasks.extend(asyncio.create_task(_worker(url)) for url in urls)
            if tasks:
                done, pending = await asyncio.wait(
                    tasks,
                    timeout=deadline,
                    return_when=asyncio.FIRST_EXCEPTION,
                )
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

                for task in done:
                    if not task.cancelled() and task.exception() is not None:
                        raise task.exception()

                timed_out = len(pending)
                if timed_out:
                    logger.warning(
                        f"Request deadline of {deadline}s reached, cancelled {timed_out} workers"
                    )
        finally:
            # no worker may outlive the batch, even when the caller is cancelled
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)
            await fetcher.aclose()

        ranked = rank_articles((o.article for o in outcomes if o.produced), top_k)

        failures = Counter(o.failure.value for o in outcomes if o.failure is not None)
        summary = {
            "attempted": len(urls),
            "succeeded": sum(1 for o in outcomes if o.produced),
            "failures": dict(failures),
            "timed_out": timed_out,
            "returned": len(ranked),
        }
        logger.info(
            f"Sourcing finished: attempted={summary['attempted']} "
            f"succeeded={summary['succeeded']} timed_out={timed_out} "
            f"returned={summary['returned']} failures={summary['failures']}"
        )
        return ranked, summary

    async def process_source(
        self,
        fetcher: ContentFetcher,
        thesis_embedding: Sequence[float],
        url: str,
    ) -> WorkerOutcome:
        """fetch -> extract -> quality gate -> metadata -> embed -> score, strictly in order"""
        fetched = await fetcher.fetch(url)
        if not fetched.ok:
            return self._drop(url, fetched.failure, fetched.detail)
        content = fetched.value

        extracted = self.extractor.extract(content)
        if not extracted.ok:
            return self._drop(url, extracted.failure, extracted.detail)
        text = extracted.value.text

        if self._use_document_fallback(content.kind, text):
            metadata = await self.metadata_extractor.extract_from_document(content.data, url)
        else:
            if not self.quality_gate.passes(text):
                phrase = self.quality_gate.matched_phrase(text)
                detail = f"block phrase '{phrase}'" if phrase else f"{len(text)} chars"
                return self._drop(url, FailureReason.LOW_QUALITY, detail)
            metadata = await self.metadata_extractor.extract(text, url)
        if not metadata.ok:
            return self._drop(url, metadata.failure, metadata.detail)
        article = metadata.value

        if not article.abstract_text:
            return self._drop(url, FailureReason.MISSING_ABSTRACT)

        try:
            passage_embedding = await self.embedder.aembed_passage(article.abstract_text)
        except EmbeddingError as exc:
            return self._drop(url, FailureReason.EMBEDDING_FAILED, str(exc))

        score = relevance_score(thesis_embedding, passage_embedding)
        return WorkerOutcome(url=url, article=article.model_copy(update={"relevance": score}))

    def _use_document_fallback(self, kind: SourceKind, text: str) -> bool:
        return (
            kind == SourceKind.PDF
            and not text.strip()
            and self.settings.extraction.document_fallback
            and getattr(self.metadata_extractor, "supports_documents", False)
        )

    @staticmethod
    def _drop(url: str, reason: FailureReason, detail: str = "") -> WorkerOutcome:
        logger.debug(f"Dropped {url}: {reason.value} {detail}".rstrip())
        return WorkerOutcome.dropped(url, reason, detail)

    async def aclose(self) -> None:
        """Release collaborator clients"""
        closers = [
            self.keyword_generator.aclose(),
            self.scraper.close(),
            self.embedder.aclose(),
            self.metadata_extractor.aclose(),
        ]
        results = await asyncio.gather(*closers, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.debug(f"Closing pipeline collaborator failed: {result}")
