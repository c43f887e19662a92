"""
bias_lens

Extracts the readable text of a web page, has it analyzed for bias and
polarization, and turns the free-form reply into a structured report.
- Extractor: cascading page text extraction
- ResultCache: bounded in-memory cache of reports
- AnalysisClient: analysis service calls with typed errors
- ResponseParser: reply text → AnalysisReport

Public API surface:
  Pipeline classes: Extractor, ResultCache, AnalysisClient, ResponseParser, BiasAnalyzer
  Data models: PageContent, PageMetadata, AnalysisReport, AlternativeViewpoint
  Error types: InsufficientContentError, AnalysisClientError (+ subclasses),
               MalformedResponseError
"""

# --- Pipeline stage classes ---
from .extractor import Extractor
from .result_cache import ResultCache
from .analysis_client import AnalysisClient
from .response_parser import ResponseParser
from .main import BiasAnalyzer

# --- Data models ---
from .schemas import PageContent, PageMetadata, AnalysisReport, AlternativeViewpoint, cache_key

# --- Configuration ---
from .config import Settings, load_settings

# --- Exceptions ---
from .exceptions import (
    BiasLensError,
    InsufficientContentError,
    AnalysisClientError,
    NotConfiguredError,
    TransportError,
    ServiceError,
    UnauthorizedError,
    ForbiddenError,
    RateLimitedError,
    ServiceFaultError,
    UnknownServiceError,
    MalformedResponseError,
)

__version__ = "0.1.0"
__all__ = [
    "Extractor",
    "ResultCache",
    "AnalysisClient",
    "ResponseParser",
    "BiasAnalyzer",
    "PageContent",
    "PageMetadata",
    "AnalysisReport",
    "AlternativeViewpoint",
    "cache_key",
    "Settings",
    "load_settings",
    "BiasLensError",
    "InsufficientContentError",
    "AnalysisClientError",
    "NotConfiguredError",
    "TransportError",
    "ServiceError",
    "UnauthorizedError",
    "ForbiddenError",
    "RateLimitedError",
    "ServiceFaultError",
    "UnknownServiceError",
    "MalformedResponseError",
]
