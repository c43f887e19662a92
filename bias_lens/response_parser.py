"""
Stage 3: Reply parser.

Turns the service's natural-language reply into an AnalysisReport.  The
reply format is only requested in the prompt, never guaranteed, so every
section extractor is an independent pure function that falls back to a
default instead of raising.  Sections may come in any order; labels are
matched case-insensitively and may be wrapped in markdown bold.

Input:  raw reply text, or the JSON envelope the service returned
Output: AnalysisReport
"""

import re
from collections.abc import Mapping
from typing import Any, Optional

from .schemas import (
    AnalysisReport,
    AlternativeViewpoint,
    DEFAULT_POLARIZATION_SCORE,
    MAX_LIST_ITEMS,
)
from .exceptions import MalformedResponseError
from .logger import get_module_logger

logger = get_module_logger("response_parser")

SCORE_LABEL = "Polarization score"
SUMMARY_LABEL = "Main viewpoint summary"
BIASES_LABEL = "Detected biases"
MISSING_LABEL = "Missing perspectives"
VIEWPOINTS_LABEL = "Alternative viewpoints"

# Line that opens a new section: one to four words and a colon, optionally
# bold (**Label:**) or a markdown heading.  A single leading "*" is a bullet,
# not emphasis, so it never starts a header.
SECTION_HEADER = re.compile(
    r"^[ \t]*(?:\*\*|__|#+[ \t]*)?(?:[A-Za-z][\w'-]*[ \t]+){0,3}[A-Za-z][\w'-]*[ \t]*[*_]*:"
)

BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

MARKDOWN_LINK = re.compile(r"\[(.*?)\]\((.*?)\)(.*)")

# Dashes, colons and pipes between a link and its description
LEADING_SEPARATORS = re.compile(r"^[\s\-–—:|]+")

PLACEHOLDER_URL = "#"


def _label_pattern(label: str) -> re.Pattern:
    return re.compile(re.escape(label) + r"[ \t]*[*_]*:?[*_]*", re.IGNORECASE)


def extract_score(text: str, label: str = SCORE_LABEL) -> int:
    """
    First integer after "label:", clamped to [0, 100]; 50 when absent.

    A parenthesized range echoed from the prompt, as in
    "Polarization score (0-100): 65", is skipped before the colon.
    """
    match = re.search(
        re.escape(label) + r"[ \t]*(?:\([^)\n]*\)[ \t]*)?[*_]*:[*_]*[^\d\n-]*(-?\d+)",
        text, re.IGNORECASE
    )
    if not match:
        logger.debug(f"No {label} found, using default {DEFAULT_POLARIZATION_SCORE}")
        return DEFAULT_POLARIZATION_SCORE
    return min(100, max(0, int(match.group(1))))


def extract_summary(text: str, label: str = SUMMARY_LABEL) -> str:
    """
    Text after the label up to and including the first sentence terminator.

    Without a terminator the rest of the label's line is used.
    """
    match = _label_pattern(label).search(text)
    if not match:
        return ""
    line = text[match.end():].split("\n", 1)[0]
    sentence = re.match(r"[^.!?]*[.!?]", line)
    return (sentence.group() if sentence else line).strip()


def extract_section(text: str, label: str) -> str:
    """
    Everything after the label, stopping before the next line that looks
    like a section header.  Empty string when the label is missing.
    """
    match = _label_pattern(label).search(text)
    if not match:
        return ""

    lines = text[match.end():].split("\n")
    section = [lines[0]]
    for line in lines[1:]:
        if SECTION_HEADER.match(line):
            break
        section.append(line)
    return "\n".join(section).strip()


def strip_bullet(line: str) -> str:
    return BULLET.sub("", line, count=1).strip()


def extract_list(text: str, label: str, limit: int = MAX_LIST_ITEMS) -> list[str]:
    """Section lines with bullets stripped, empties dropped, at most limit."""
    items = [strip_bullet(line) for line in extract_section(text, label).split("\n")]
    return [item for item in items if item][:limit]


def parse_viewpoint(line: str) -> Optional[AlternativeViewpoint]:
    """
    "[title](url) - description", or a bare title with a placeholder URL.

    Returns None for lines without a usable title.
    """
    match = MARKDOWN_LINK.search(line)
    if match:
        title = match.group(1).strip()
        url = match.group(2).strip() or PLACEHOLDER_URL
        description = LEADING_SEPARATORS.sub("", match.group(3)).strip()
    else:
        title = strip_bullet(line)
        url = PLACEHOLDER_URL
        description = ""

    if not title:
        return None
    return AlternativeViewpoint(title=title, url=url, description=description)


def extract_viewpoints(text: str, label: str = VIEWPOINTS_LABEL,
                       limit: int = MAX_LIST_ITEMS) -> list[AlternativeViewpoint]:
    viewpoints = []
    for line in extract_section(text, label).split("\n"):
        if not line.strip():
            continue
        viewpoint = parse_viewpoint(line)
        if viewpoint is not None:
            viewpoints.append(viewpoint)
    return viewpoints[:limit]


def _text_from_content(content: Any) -> Optional[str]:
    # A plain string, or a list of {"type": "text", "text": ...} blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = [
            block.get("text") for block in content
            if isinstance(block, Mapping)
            and block.get("type", "text") == "text"
            and isinstance(block.get("text"), str)
        ]
        if texts:
            return "\n".join(texts)
    return None


def extract_reply_text(envelope: Any) -> str:
    """
    Find the text body of a service reply.

    Accepts the raw text itself, an envelope whose "content" holds the text
    (string or text blocks), or one whose first "messages" entry does.

    Raises:
        MalformedResponseError: no text body anywhere
    """
    if isinstance(envelope, str):
        return envelope

    if isinstance(envelope, Mapping):
        text = _text_from_content(envelope.get("content"))
        if text is not None:
            return text

        messages = envelope.get("messages")
        if isinstance(messages, list) and messages and isinstance(messages[0], Mapping):
            text = _text_from_content(messages[0].get("content"))
            if text is not None:
                return text

    logger.error(f"Unexpected response format: {type(envelope).__name__}")
    raise MalformedResponseError(
        "Invalid response format from the analysis service: no text body",
        details={"envelope_type": type(envelope).__name__}
    )


class ResponseParser:
    """Composes the section extractors into an AnalysisReport."""

    def parse(self, raw_reply: str) -> AnalysisReport:
        """
        Parse a reply's text.

        Missing or garbled sections fall back to defaults; only a reply
        that is not text at all raises MalformedResponseError.
        """
        if not isinstance(raw_reply, str):
            raise MalformedResponseError(
                "Reply is not text",
                details={"reply_type": type(raw_reply).__name__}
            )

        report = AnalysisReport(
            polarization_score=extract_score(raw_reply),
            summary=extract_summary(raw_reply),
            biases=extract_list(raw_reply, BIASES_LABEL),
            missing_perspectives=extract_list(raw_reply, MISSING_LABEL),
            alternative_viewpoints=extract_viewpoints(raw_reply),
        )
        logger.debug(
            f"Parsed report: score={report.polarization_score}, "
            f"{len(report.biases)} biases, {len(report.missing_perspectives)} missing, "
            f"{len(report.alternative_viewpoints)} viewpoints"
        )
        return report

    def parse_envelope(self, envelope: Any) -> AnalysisReport:
        """Parse a full service response (see extract_reply_text)."""
        return self.parse(extract_reply_text(envelope))


def parse_reply(raw_reply: str) -> AnalysisReport:
    """Convenience function to parse a reply's text."""
    return ResponseParser().parse(raw_reply)
