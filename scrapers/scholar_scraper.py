"""
Scholar Scraper
Turns a keyword query into candidate source URLs from scholarly search
result pages.
"""
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlsplit
import logging

import httpx
from bs4 import BeautifulSoup
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import FetchSettings, ScholarSettings

from .base import BaseScraper, build_http_client


logger = logging.getLogger(__name__)


def host_is_blocked(url: str, blocked_domains: Iterable[str]) -> bool:
    """Exact host or any subdomain of a blocked domain"""
    host = (urlsplit(url).hostname or "").lower()
    if not host:
        return True
    for domain in blocked_domains:
        domain = domain.strip().lower()
        if not domain:
            continue
        if host == domain or host.endswith("." + domain):
            return True
    return False


def parse_result_links(html: str, base_url: str) -> List[str]:
    """
    Links of one result page, in page order.

    Each result contributes its full-text side link (often a PDF) first,
    then its title link.
    """
    soup = BeautifulSoup(html, "lxml")
    links: List[str] = []
    for result in soup.select("div.gs_r"):
        for selector in ("div.gs_or_ggsm a[href]", "h3.gs_rt a[href]"):
            anchor = result.select_one(selector)
            if anchor is None:
                continue
            href = (anchor.get("href") or "").strip()
            if href:
                links.append(urljoin(base_url, href))
    return links


class ScholarScraper(BaseScraper):
    """
    Scholarly search result scraper

    Features:
    - up to ``pages`` result pages of ``per_page`` results each
    - per-page retries with exponential back-off
    - host blocklist for aggregators and paywalled publishers
    - order-preserving de-duplication
    """

    def __init__(
        self,
        settings: Optional[ScholarSettings] = None,
        fetch_settings: Optional[FetchSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(client)
        self.settings = settings or ScholarSettings()
        self.fetch_settings = fetch_settings or FetchSettings()

    @property
    def name(self) -> str:
        return "Scholar"

    def _create_client(self) -> httpx.AsyncClient:
        return build_http_client(self.fetch_settings, timeout_sec=self.settings.timeout_sec)

    @retry(
        retry=retry_if_exception_type(httpx.HTTPError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _fetch_page(self, query: str, start: int) -> str:
        params = {
            "q": query,
            "start": start,
            "hl": self.settings.language,
            "num": self.settings.per_page,
        }
        response = await self._get_client().get(self.settings.base_url, params=params)
        response.raise_for_status()
        return response.text

    async def search(self, query: str, max_results: Optional[int] = None) -> List[str]:
        """
        Search result URLs for a keyword query

        Args:
            query: Keyword query, used verbatim
            max_results: Cap on returned URLs (settings default when omitted)

        Returns:
            De-duplicated, non-blocked http(s) URLs in result order
        """
        limit = max_results or self.settings.max_results
        query = (query or "").strip()
        if not query:
            return []

        urls: List[str] = []
        seen = set()
        for page in range(self.settings.pages):
            start = page * self.settings.per_page
            try:
                html = await self._fetch_page(query, start)
            except httpx.HTTPError as e:
                logger.warning(f"[{self.name}] Result page at offset {start} skipped: {e}")
                continue

            page_links = parse_result_links(html, self.settings.base_url)
            if not page_links:
                logger.debug(f"[{self.name}] No results at offset {start}, stopping")
                break

            for link in page_links:
                if urlsplit(link).scheme not in ("http", "https"):
                    continue
                if link in seen:
                    continue
                seen.add(link)
                if host_is_blocked(link, self.settings.blocked_domains):
                    continue
                urls.append(link)

            if len(urls) >= limit:
                break

        urls = urls[:limit]
        self._log_search(query, len(urls))
        return urls
