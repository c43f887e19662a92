"""
Stage 1: Cascading page text extractor.

Page structures are unknown in advance, so extraction walks an ordered list
of strategies from "best semantic guess" down to "anything at all" and keeps
the first result long enough to analyze.

Input:  a parsed page (BeautifulSoup) or raw HTML, plus the page URL
Output: PageContent (normalized text + <meta> metadata) for the analysis client
"""

import copy
import re
import time
from typing import Callable, Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .schemas import PageContent, PageMetadata
from .exceptions import InsufficientContentError
from .logger import get_module_logger

logger = get_module_logger("extractor")

# Semantic containers, in priority order.  The first selector that matches
# anything wins, even if its text turns out to be too short.
SEMANTIC_SELECTORS = [
    'article',
    '[role="article"]',
    '[role="main"]',
    'main',
    '#article',
    '.article',
    '.post-content',
    '.entry-content',
]

# Removed from the body copy in the last-resort strategy
NOISE_SELECTOR = (
    'header, footer, nav, aside, script, style, '
    '.header, .footer, .nav, .menu, .sidebar, .ad, .advertisement'
)

DEFAULT_MIN_CONTENT_LENGTH = 100
DEFAULT_MIN_PARAGRAPH_LENGTH = 20

# (field, meta names tried in order)
META_FIELDS = [
    ("author", ["author", "article:author"]),
    ("publish_date", ["article:published_time", "publishedDate"]),
    ("keywords", ["keywords"]),
    ("description", ["description"]),
]

WHITESPACE_RUN = re.compile(r'\s+')

Strategy = Callable[[BeautifulSoup], Optional[str]]


def parse_document(html: str) -> BeautifulSoup:
    """
    Parse HTML with the html5lib → lxml → html.parser fallback chain.

    html5lib follows the browser parsing algorithm, so the tree matches
    what a live page would expose.  The others only step in if it breaks.
    """
    try:
        return BeautifulSoup(html, 'html5lib')
    except Exception as e:
        logger.warning(f"html5lib parsing failed, trying lxml: {e}")
    try:
        return BeautifulSoup(html, 'lxml')
    except Exception as e:
        logger.warning(f"lxml parsing also failed: {e}")
    return BeautifulSoup(html, 'html.parser')


def normalize_text(text: str) -> str:
    """
    Collapse whitespace: a run holding a blank line becomes one newline,
    any other run becomes one space.
    """
    def collapse(match: re.Match) -> str:
        return '\n' if match.group().count('\n') >= 2 else ' '

    return WHITESPACE_RUN.sub(collapse, text).strip()


# --- Strategies: pure functions, soup → text or None ---

def semantic_container_text(soup: BeautifulSoup) -> Optional[str]:
    for selector in SEMANTIC_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            return element.get_text()
    return None


def main_element_text(soup: BeautifulSoup) -> Optional[str]:
    element = soup.find('main')
    return element.get_text() if element is not None else None


def paragraph_text(soup: BeautifulSoup,
                   min_length: int = DEFAULT_MIN_PARAGRAPH_LENGTH) -> Optional[str]:
    """All <p> texts longer than min_length, separated by blank lines."""
    paragraphs = [p.get_text().strip() for p in soup.find_all('p')]
    paragraphs = [text for text in paragraphs if len(text) > min_length]
    if paragraphs:
        return '\n\n'.join(paragraphs)
    return None


def cleaned_body_text(soup: BeautifulSoup) -> Optional[str]:
    """Body text with headers, navigation, sidebars and ads removed."""
    if soup.body is None:
        return None
    # Work on a copy so the caller's document is left untouched
    body = copy.copy(soup.body)
    for element in body.select(NOISE_SELECTOR):
        element.decompose()
    return body.get_text()


def raw_body_text(soup: BeautifulSoup) -> str:
    if soup.body is not None:
        return soup.body.get_text()
    return soup.get_text()


def find_meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
    """content of <meta name=...> or <meta property=...>, whichever comes first."""
    tag = soup.find('meta', attrs={'name': name}) or soup.find('meta', attrs={'property': name})
    if tag is None:
        return None
    return tag.get('content')


def extract_metadata(soup: BeautifulSoup) -> PageMetadata:
    values = {}
    for field, names in META_FIELDS:
        for name in names:
            value = find_meta_content(soup, name)
            if value:
                values[field] = value
                break
    return PageMetadata(**values)


class Extractor:
    """Extracts analyzable text from a page via an ordered strategy cascade."""

    def __init__(
        self,
        min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
        min_paragraph_length: int = DEFAULT_MIN_PARAGRAPH_LENGTH
    ):
        self.min_content_length = min_content_length
        self.min_paragraph_length = min_paragraph_length

        self.strategies: list[tuple[str, Strategy]] = [
            ("semantic_container", semantic_container_text),
            ("main_element", main_element_text),
            ("paragraphs", lambda soup: paragraph_text(soup, self.min_paragraph_length)),
            ("cleaned_body", cleaned_body_text),
        ]

    def extract(self, page: Union[BeautifulSoup, str], url: str) -> PageContent:
        """
        Extract page text and metadata.

        Args:
            page: Parsed document, or raw HTML to parse
            url: Address of the page (source of url/domain fields)

        Returns:
            PageContent with normalized text

        Raises:
            InsufficientContentError: even the raw body text is too short
        """
        soup = parse_document(page) if isinstance(page, str) else page
        logger.info(f"Starting extraction: {url}")

        content = self.get_page_content(soup)
        if len(content) < self.min_content_length:
            logger.warning(f"Insufficient content length: {len(content)}")
            raise InsufficientContentError(
                "Not enough content found on page",
                content_length=len(content),
                min_length=self.min_content_length
            )

        title_tag = soup.find('title')
        result = PageContent(
            url=url,
            domain=urlparse(url).hostname or "",
            title=title_tag.get_text().strip() if title_tag else "",
            content=content,
            metadata=extract_metadata(soup),
            timestamp=int(time.time() * 1000)
        )

        logger.info(f"Extracted {len(result.content)} chars from {result.domain or url}")
        return result

    def get_page_content(self, soup: BeautifulSoup) -> str:
        """
        Run the cascade; return the first normalized text longer than the minimum.

        Lengths are measured after normalization, so whitespace padding
        never lets a short container win.
        """
        for name, strategy in self.strategies:
            logger.debug(f"Trying extraction strategy: {name}")
            content = normalize_text(strategy(soup) or "")
            if len(content) > self.min_content_length:
                logger.info(f"Extracted content using {name}")
                return content
            logger.debug(f"Strategy {name} failed or returned insufficient content")

        # Unconditional fallback; the length check in extract() may still reject it
        logger.info("All extraction strategies failed, falling back to body text")
        return normalize_text(raw_body_text(soup))


def extract(page: Union[BeautifulSoup, str], url: str) -> PageContent:
    """Convenience function to extract a page with default settings."""
    return Extractor().extract(page, url)
