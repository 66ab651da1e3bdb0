"""
Scrapers Module
"""
from .base import BaseScraper, build_http_client
from .content_fetcher import ContentFetcher, is_pdf_candidate, media_type
from .scholar_scraper import ScholarScraper, host_is_blocked, parse_result_links

__all__ = [
    # Base
    "BaseScraper",
    "build_http_client",
    # Fetcher
    "ContentFetcher",
    "is_pdf_candidate",
    "media_type",
    # Scholar
    "ScholarScraper",
    "host_is_blocked",
    "parse_result_links",
]
