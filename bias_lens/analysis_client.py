"""
Stage 2: Analysis service client.

Sends extracted page text to the Anthropic Messages API and hands the reply
to the ResponseParser.  Every failure comes back as one typed error:
ServiceError subclasses for HTTP statuses, TransportError when no response
arrived, NotConfiguredError when there is no API key.

Each call makes exactly one request (SDK retries are disabled), bounded by
the configured timeout.
"""

import os
import re
from typing import Optional

import anthropic
import httpx

from .config import DEFAULT_MODEL, Settings
from .schemas import PageContent, AnalysisReport
from .response_parser import ResponseParser
from .exceptions import (
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
from .logger import get_module_logger

logger = get_module_logger("analysis_client")

API_KEY_ENV = "ANTHROPIC_API_KEY"

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TIMEOUT = 60.0

# 401 bodies that point at browser-access setup rather than a bad key
CORS_FAILURE = re.compile(r"\bCORS\b|cross-origin", re.IGNORECASE)

# The reply format below is a request, not a guarantee.  ResponseParser
# handles replies that ignore parts of it.
SYSTEM_PROMPT = """Analyze the following content for polarization and bias.
Provide a structured response in exactly this format:
Polarization score: [0-100]
Main viewpoint summary: [one concise sentence]
Detected biases: [exactly 3 most significant biases, bullet points]
Missing perspectives: [exactly 3 key missing viewpoints, bullet points]
Alternative viewpoints: [exactly 3 suggested articles in markdown link format]

For alternative viewpoints, provide links in this format:
• [Article Title 1](URL1) - Brief description
• [Article Title 2](URL2) - Brief description
• [Article Title 3](URL3) - Brief description

Keep responses concise and focused on the most important points."""


def map_status_error(status_code: int, body: str) -> ServiceError:
    """Translate a non-success HTTP status (and its body) into a ServiceError."""
    if status_code == 401:
        if CORS_FAILURE.search(body):
            return UnauthorizedError(
                "Browser access not properly configured. Please check API headers.",
                status_code=status_code, body=body, configuration_error=True
            )
        return UnauthorizedError(
            "Invalid API key. Please check your API key in the settings.",
            status_code=status_code, body=body
        )
    if status_code == 403:
        return ForbiddenError("Access forbidden. Please check API permissions.",
                              status_code, body)
    if status_code == 429:
        return RateLimitedError("Rate limit exceeded. Please try again later.",
                                status_code, body)
    if status_code == 500:
        return ServiceFaultError("Claude API service error. Please try again later.",
                                 status_code, body)
    return UnknownServiceError(f"API Error: {status_code} - {body}", status_code, body)


def _reply_envelope(message) -> dict:
    # A 200 with a non-JSON body (a proxy error page, say) comes back as a str
    if not isinstance(message, anthropic.types.Message):
        logger.error(f"Unexpected reply type from the SDK: {type(message).__name__}")
        raise MalformedResponseError(
            "Invalid response format from the analysis service: not a message",
            details={"reply_type": type(message).__name__}
        )
    return message.model_dump()


def _error_body(error: anthropic.APIStatusError) -> str:
    try:
        return error.response.text
    except httpx.ResponseNotRead:
        return str(error.body or error.message)


class AnalysisClient:
    """
    Client for the polarization analysis endpoint.

    The API key may be supplied at construction, later through configure(),
    or through the ANTHROPIC_API_KEY environment variable, which is re-read
    on every call until a key is found.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
        async_http_client: Optional[httpx.AsyncClient] = None,
        parser: Optional[ResponseParser] = None
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.parser = parser or ResponseParser()

        # Injected transports (tests use httpx.MockTransport)
        self._http_client = http_client
        self._async_http_client = async_http_client

        # SDK clients, created lazily and rebuilt when the key changes
        self._client: Optional[anthropic.Anthropic] = None
        self._async_client: Optional[anthropic.AsyncAnthropic] = None
        self._client_key: Optional[str] = None
        self._async_client_key: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "AnalysisClient":
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            **kwargs
        )

    def configure(self, api_key: Optional[str]) -> None:
        """Set (or with None, forget) the API key."""
        self.api_key = api_key.strip() if api_key else None
        logger.info("API key configured" if self.api_key else "API key cleared")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key or os.getenv(API_KEY_ENV))

    def _resolve_api_key(self) -> str:
        api_key = self.api_key or os.getenv(API_KEY_ENV)
        if not api_key:
            logger.warning("No API key configured")
            raise NotConfiguredError()
        return api_key

    def _sync_client(self, api_key: str) -> anthropic.Anthropic:
        if self._client is None or self._client_key != api_key:
            self._client = anthropic.Anthropic(
                api_key=api_key,
                max_retries=0,
                timeout=self.timeout,
                http_client=self._http_client
            )
            self._client_key = api_key
        return self._client

    def _async_sdk_client(self, api_key: str) -> anthropic.AsyncAnthropic:
        if self._async_client is None or self._async_client_key != api_key:
            self._async_client = anthropic.AsyncAnthropic(
                api_key=api_key,
                max_retries=0,
                timeout=self.timeout,
                http_client=self._async_http_client
            )
            self._async_client_key = api_key
        return self._async_client

    def _request(self, content: PageContent) -> dict:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": content.content}],
        }

    def analyze(self, content: PageContent) -> AnalysisReport:
        """
        Analyze one page.

        Raises:
            NotConfiguredError: no API key anywhere
            ServiceError: the service answered with a non-success status
            TransportError: no response (network failure or timeout)
            MalformedResponseError: the reply had no text body
        """
        api_key = self._resolve_api_key()
        logger.info(f"Starting analysis: {content.url} ({len(content.content)} chars)")

        try:
            message = self._sync_client(api_key).messages.create(**self._request(content))
        except anthropic.APIStatusError as e:
            raise self._service_error(e) from e
        except anthropic.APIConnectionError as e:
            raise self._transport_error(e) from e

        logger.info(f"Analysis complete: {content.url}")
        return self.parser.parse_envelope(_reply_envelope(message))

    async def analyze_async(self, content: PageContent) -> AnalysisReport:
        """Same as analyze(), suspending on the network wait."""
        api_key = self._resolve_api_key()
        logger.info(f"Starting analysis: {content.url} ({len(content.content)} chars)")

        try:
            message = await self._async_sdk_client(api_key).messages.create(
                **self._request(content)
            )
        except anthropic.APIStatusError as e:
            raise self._service_error(e) from e
        except anthropic.APIConnectionError as e:
            raise self._transport_error(e) from e

        logger.info(f"Analysis complete: {content.url}")
        return self.parser.parse_envelope(_reply_envelope(message))

    def _service_error(self, error: anthropic.APIStatusError) -> ServiceError:
        body = _error_body(error)
        logger.error(f"Claude API error {error.status_code}: {body}")
        return map_status_error(error.status_code, body)

    def _transport_error(self, error: anthropic.APIConnectionError) -> TransportError:
        logger.error(f"Claude API request failed: {error}")
        return TransportError(
            f"Could not reach the analysis service: {error}",
            details={"timeout": isinstance(error, anthropic.APITimeoutError)}
        )
