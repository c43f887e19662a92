"""
Pydantic schemas defining the contracts between pipeline stages.

Data flow:
  Extractor → PageContent → (ResultCache miss) → AnalysisClient
  AnalysisClient reply → ResponseParser → AnalysisReport → ResultCache
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

# The report never carries more than this many items per list field
MAX_LIST_ITEMS = 3

DEFAULT_POLARIZATION_SCORE = 50


# --- Extractor output ---

class PageMetadata(BaseModel):
    """Best-effort <meta> values. Missing tags stay None."""
    model_config = ConfigDict(frozen=True)

    author: Optional[str] = None
    publish_date: Optional[str] = None
    keywords: Optional[str] = None
    description: Optional[str] = None


class PageContent(BaseModel):
    """Normalized text of one page, created once per extraction call."""
    model_config = ConfigDict(frozen=True)

    url: str
    domain: str = ""
    title: str = ""
    content: str
    metadata: PageMetadata = Field(default_factory=PageMetadata)
    timestamp: int = Field(description="Extraction time, milliseconds since epoch")


def cache_key(content: PageContent) -> str:
    """Cache identity of an extraction: the same URL extracted twice is two keys."""
    return f"{content.url}-{content.timestamp}"


# --- ResponseParser output ---

class AlternativeViewpoint(BaseModel):
    """A suggested article presenting another side."""
    model_config = ConfigDict(frozen=True)

    title: str
    url: str = "#"
    description: str = ""


class AnalysisReport(BaseModel):
    """
    Structured bias/polarization result.

    The validators hold the invariants no matter who builds the report:
    score clamped into [0, 100] and every list truncated to MAX_LIST_ITEMS.
    """
    model_config = ConfigDict(frozen=True)

    polarization_score: int = DEFAULT_POLARIZATION_SCORE
    summary: str = ""
    biases: list[str] = Field(default_factory=list)
    missing_perspectives: list[str] = Field(default_factory=list)
    alternative_viewpoints: list[AlternativeViewpoint] = Field(default_factory=list)

    @field_validator("polarization_score")
    @classmethod
    def clamp_score(cls, value: int) -> int:
        return min(100, max(0, value))

    @field_validator("biases", "missing_perspectives", "alternative_viewpoints")
    @classmethod
    def truncate_list(cls, value: list) -> list:
        return value[:MAX_LIST_ITEMS]


# --- ResultCache internals ---

class CacheEntry(BaseModel):
    """A cached report plus the cache-clock time it was stored."""
    model_config = ConfigDict(frozen=True)

    report: AnalysisReport
    stored_at: float
