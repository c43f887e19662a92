"""
Tests for the cascading page extractor.

No network or API key needed: pages are inline HTML strings.
"""

import pytest

from bias_lens.extractor import (
    Extractor,
    normalize_text,
    parse_document,
    paragraph_text,
    semantic_container_text,
)
from bias_lens.exceptions import InsufficientContentError

URL = "https://news.example.com/politics/story-1"

ARTICLE_TEXT = ("word " * 100).strip()

PARAGRAPHS = [
    "The city council voted on the new transit budget late on Tuesday.",
    "Supporters said the plan would cut commute times across the region.",
    "Opponents argued the cost estimates were far too optimistic for now.",
]


def page(body: str, head: str = "<title>Story</title>") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


def test_article_wins_over_paragraphs():
    """An <article> found first is returned even when other paragraphs exist."""
    short_paragraphs = "".join(f"<p>Short text {i}</p>" for i in range(5))
    html = page(f"<article>{ARTICLE_TEXT}</article>{short_paragraphs}")

    content = Extractor().extract(html, URL)

    assert content.content == ARTICLE_TEXT
    assert "Short text" not in content.content


def test_paragraphs_joined_when_no_semantic_container():
    body = "".join(f"<div><p>{text}</p></div>" for text in PARAGRAPHS) + "<p>Too short</p>"

    content = Extractor().extract(page(body), URL)

    # Blank-line separators survive normalization as single newlines
    assert content.content == "\n".join(PARAGRAPHS)
    assert "Too short" not in content.content


def test_short_article_falls_through_to_next_strategy():
    body = "<article>Tiny teaser.</article>" + "".join(f"<p>{text}</p>" for text in PARAGRAPHS)

    content = Extractor().extract(page(body), URL)

    assert content.content == "\n".join(PARAGRAPHS)


def test_whitespace_padding_does_not_count_toward_minimum():
    """A padded teaser article must not beat the real paragraphs below it."""
    padded = "<article>Breaking:" + " " * 150 + "teaser.</article>"
    paragraphs = [f"Paragraph {i} has enough words to be kept here." for i in range(4)]
    body = padded + "".join(f"<p>{text}</p>" for text in paragraphs)

    content = Extractor().extract(page(body), URL)

    assert content.content == "\n".join(paragraphs)
    assert len(content.content) >= 100


def test_padded_page_below_minimum_raises():
    with pytest.raises(InsufficientContentError) as exc_info:
        Extractor().extract(page("<div>Short" + " " * 200 + "text.</div>"), URL)

    assert exc_info.value.content_length == len("Short text.")


def test_role_main_and_class_selectors():
    html = page(f'<div class="entry-content">{ARTICLE_TEXT}</div>')
    assert semantic_container_text(parse_document(html)).strip() == ARTICLE_TEXT

    html = page(f'<div role="main">{ARTICLE_TEXT}</div>')
    assert semantic_container_text(parse_document(html)).strip() == ARTICLE_TEXT


def test_body_fallback_drops_navigation_and_ads():
    nav_text = "Home News Sport Weather Opinion " * 10
    story = "Residents gathered downtown to discuss the proposal in detail. " * 3
    body = (
        f"<nav>{nav_text}</nav>"
        f"<div class='sidebar'>Trending now: celebrity gossip and more gossip</div>"
        f"<div class='ad'>Buy now! Limited offer on everything today</div>"
        f"<div>{story}</div>"
        f"<footer>Copyright notice and legal links</footer>"
    )
    soup = parse_document(page(body))

    content = Extractor().extract(soup, URL)

    assert content.content == story.strip()
    assert "Trending" not in content.content
    assert "Buy now" not in content.content
    # The caller's document is left untouched
    assert soup.find("nav") is not None


def test_insufficient_content_raises():
    with pytest.raises(InsufficientContentError) as exc_info:
        Extractor().extract(page("<div>Nothing much here.</div>"), URL)

    assert exc_info.value.min_length == 100
    assert exc_info.value.content_length < 100


def test_min_content_length_is_configurable():
    content = Extractor(min_content_length=10).extract(
        page("<div>Nothing much here, really.</div>"), URL
    )
    assert content.content == "Nothing much here, really."


def test_page_fields():
    head = (
        "<title>  Council Approves Budget  </title>"
        '<meta name="author" content="Jane Reporter">'
        '<meta property="article:published_time" content="2024-05-01T10:00:00Z">'
        '<meta name="keywords" content="transit, budget">'
        '<meta name="description" content="The council approved the budget.">'
    )
    content = Extractor().extract(page(f"<article>{ARTICLE_TEXT}</article>", head), URL)

    assert content.url == URL
    assert content.domain == "news.example.com"
    assert content.title == "Council Approves Budget"
    assert content.timestamp > 0
    assert content.metadata.author == "Jane Reporter"
    assert content.metadata.publish_date == "2024-05-01T10:00:00Z"
    assert content.metadata.keywords == "transit, budget"
    assert content.metadata.description == "The council approved the budget."


def test_metadata_fallback_names_and_absent_tags():
    head = '<meta property="article:author" content="A. Writer">'
    content = Extractor().extract(page(f"<article>{ARTICLE_TEXT}</article>", head), URL)

    assert content.metadata.author == "A. Writer"
    assert content.metadata.publish_date is None
    assert content.metadata.keywords is None
    assert content.metadata.description is None


def test_paragraph_threshold():
    soup = parse_document(page("<p>short</p><p>exactly twenty chars</p>"))
    assert paragraph_text(soup) is None
    assert paragraph_text(soup, min_length=5) == "exactly twenty chars"


def test_normalize_text():
    assert normalize_text("  a  \t b\n c  ") == "a b c"
    assert normalize_text("first\n\n\n   second\n \n third") == "first\nsecond\nthird"
    assert normalize_text("\n\n") == ""
