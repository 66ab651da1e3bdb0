"""
Base Scraper
Abstract base for search-result scrapers
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import logging

import httpx

from config import FetchSettings


logger = logging.getLogger(__name__)


def build_http_client(
    settings: FetchSettings,
    timeout_sec: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Shared async HTTP client with a browser user agent.

    One client is created per pipeline invocation and shared read-only by
    every worker.
    """
    limits = httpx.Limits(
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_connections,
    )
    return httpx.AsyncClient(
        headers={
            "User-Agent": settings.user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        },
        timeout=httpx.Timeout(timeout_sec or settings.timeout_sec),
        limits=limits,
        follow_redirects=True,
        transport=transport,
    )


class BaseScraper(ABC):
    """
    Search scraper base class.
    Subclasses turn a keyword query into an ordered list of candidate URLs.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def name(self) -> str:
        """Scraper name"""
        pass

    @abstractmethod
    async def search(self, query: str, max_results: Optional[int] = None) -> List[str]:
        """
        Search interface

        Args:
            query: Keyword query
            max_results: Result cap

        Returns:
            Candidate URLs in result order
        """
        pass

    @abstractmethod
    def _create_client(self) -> httpx.AsyncClient:
        pass

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._create_client()
            self._owns_client = True
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the HTTP client if this scraper created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    def _log_search(self, query: str, count: int):
        logger.info(f"[{self.name}] Search '{query}' returned {count} results")

    def _log_error(self, message: str, error: Exception):
        logger.error(f"[{self.name}] {message}: {error}")
