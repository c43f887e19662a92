"""
Tests for the BiasAnalyzer orchestrator: cache-first flow and error propagation.

A stub client records calls instead of talking to the service.
"""

import logging

import pytest

from bias_lens.main import BiasAnalyzer
from bias_lens.logger import setup_logger
from bias_lens.config import Settings
from bias_lens.result_cache import ResultCache
from bias_lens.schemas import AnalysisReport, PageContent, cache_key
from bias_lens.exceptions import InsufficientContentError, RateLimitedError

URL = "https://news.example.com/story"

HTML = (
    "<html><head><title>Story</title></head><body>"
    f"<article>{'The council voted on the transit budget. ' * 5}</article>"
    "</body></html>"
)


class StubClient:
    def __init__(self, report=None, error=None):
        self.report = report or AnalysisReport(polarization_score=65, summary="One-sided.")
        self.error = error
        self.calls = []

    def analyze(self, content):
        self.calls.append(content)
        if self.error:
            raise self.error
        return self.report

    async def analyze_async(self, content):
        return self.analyze(content)


def content(timestamp: int = 1) -> PageContent:
    return PageContent(url=URL, content="x" * 200, timestamp=timestamp)


def make_analyzer(client) -> BiasAnalyzer:
    return BiasAnalyzer(client=client, settings=Settings())


def test_cache_key_from_url_and_timestamp():
    assert cache_key(content(42)) == f"{URL}-42"


def test_second_request_served_from_cache():
    client = StubClient()
    analyzer = make_analyzer(client)

    first = analyzer.analyze_content(content())
    second = analyzer.analyze_content(content())

    assert first == second
    assert len(client.calls) == 1


def test_new_timestamp_is_new_analysis():
    client = StubClient()
    analyzer = make_analyzer(client)

    analyzer.analyze_content(content(1))
    analyzer.analyze_content(content(2))

    assert len(client.calls) == 2


def test_client_errors_propagate_and_nothing_is_cached():
    client = StubClient(error=RateLimitedError("Rate limit exceeded.", 429))
    analyzer = make_analyzer(client)

    with pytest.raises(RateLimitedError):
        analyzer.analyze_content(content())

    assert len(analyzer.cache) == 0


def test_analyze_page_extracts_then_analyzes():
    client = StubClient()
    analyzer = make_analyzer(client)

    report = analyzer.analyze_page(HTML, URL)

    assert report.polarization_score == 65
    assert client.calls[0].title == "Story"
    assert client.calls[0].content.startswith("The council voted")


def test_insufficient_page_never_reaches_client():
    client = StubClient()
    analyzer = make_analyzer(client)

    with pytest.raises(InsufficientContentError):
        analyzer.analyze_page("<html><body><p>Hi</p></body></html>", URL)

    assert client.calls == []


def test_settings_shape_cache_and_extractor():
    analyzer = BiasAnalyzer(
        client=StubClient(),
        settings=Settings(cache_capacity=5, cache_max_age=60, min_content_length=10),
    )
    assert analyzer.cache.capacity == 5
    assert analyzer.cache.max_age == 60
    assert analyzer.extractor.min_content_length == 10


def test_clear_cache():
    analyzer = BiasAnalyzer(client=StubClient(), cache=ResultCache(), settings=Settings())
    analyzer.analyze_content(content())

    assert analyzer.clear_cache() == 1


@pytest.mark.asyncio
async def test_async_flow_uses_cache():
    client = StubClient()
    analyzer = make_analyzer(client)

    await analyzer.analyze_content_async(content())
    await analyzer.analyze_page_async(HTML, URL)
    await analyzer.analyze_content_async(content())

    assert len(client.calls) == 2


def test_load_settings_reads_environment(monkeypatch):
    from bias_lens.config import load_settings

    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
    monkeypatch.setenv("BIAS_LENS_CACHE_CAPACITY", "7")
    monkeypatch.setenv("BIAS_LENS_TIMEOUT", "12.5")

    settings = load_settings(model="claude-test")

    assert settings.api_key == "env-key"
    assert settings.cache_capacity == 7
    assert settings.timeout == 12.5
    assert settings.model == "claude-test"
    assert settings.min_content_length == 100


def test_log_level_relevels_package_logger():
    package_logger = logging.getLogger("bias_lens")
    original = package_logger.level
    try:
        BiasAnalyzer(client=StubClient(), settings=Settings(), log_level=logging.DEBUG)

        assert package_logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in package_logger.handlers)
        assert logging.getLogger("bias_lens.extractor").getEffectiveLevel() == logging.DEBUG
    finally:
        setup_logger(level=original)
