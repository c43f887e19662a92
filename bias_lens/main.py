"""
Main orchestrator for the bias_lens pipeline.

Coordinates the stages: Extractor → ResultCache → AnalysisClient → ResponseParser.
The cache is checked before every external call and written after every
successful one.  Errors from extraction and the client propagate unchanged.

Two flows asking for the same uncached key at once may both reach the
service; the second put overwrites the first with an equivalent report.
"""

from typing import Optional, Union

from bs4 import BeautifulSoup

from .extractor import Extractor
from .result_cache import ResultCache
from .analysis_client import AnalysisClient
from .schemas import PageContent, AnalysisReport, cache_key
from .config import Settings, load_settings
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")


class BiasAnalyzer:
    """
    Main orchestrator for page bias analysis.

    Owns one ResultCache for its lifetime; create one BiasAnalyzer per
    process and share it between concurrent flows.
    """

    def __init__(
        self,
        client: Optional[AnalysisClient] = None,
        cache: Optional[ResultCache] = None,
        extractor: Optional[Extractor] = None,
        settings: Optional[Settings] = None,
        log_level: Optional[int] = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.settings = settings or load_settings()
        self.extractor = extractor or Extractor(
            min_content_length=self.settings.min_content_length,
            min_paragraph_length=self.settings.min_paragraph_length
        )
        self.cache = cache if cache is not None else ResultCache(
            max_age=self.settings.cache_max_age,
            capacity=self.settings.cache_capacity
        )
        self.client = client or AnalysisClient.from_settings(self.settings)

        logger.info("BiasAnalyzer initialized")

    def analyze_content(self, content: PageContent) -> AnalysisReport:
        """Return the report for extracted content, calling the service on a cache miss."""
        key = cache_key(content)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached analysis: {key}")
            return cached

        report = self.client.analyze(content)
        self.cache.put(key, report)
        return report

    async def analyze_content_async(self, content: PageContent) -> AnalysisReport:
        key = cache_key(content)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached analysis: {key}")
            return cached

        report = await self.client.analyze_async(content)
        self.cache.put(key, report)
        return report

    def analyze_page(self, page: Union[BeautifulSoup, str], url: str) -> AnalysisReport:
        """Extract a page and analyze it."""
        logger.info(f"Starting pipeline: {url}")
        return self.analyze_content(self.extractor.extract(page, url))

    async def analyze_page_async(self, page: Union[BeautifulSoup, str], url: str) -> AnalysisReport:
        logger.info(f"Starting pipeline: {url}")
        return await self.analyze_content_async(self.extractor.extract(page, url))

    def clear_cache(self) -> int:
        return self.cache.clear()


def analyze_html(html: str, url: str, api_key: Optional[str] = None) -> AnalysisReport:
    """Convenience function to analyze one page of HTML."""
    return BiasAnalyzer(settings=load_settings(api_key=api_key)).analyze_page(html, url)
