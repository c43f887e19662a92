"""
Custom exceptions for the bias_lens pipeline.

Error philosophy:
  - InsufficientContentError → FAIL HARD: the page has nothing worth analyzing.
  - AnalysisClientError      → FAIL HARD: propagated unchanged to the caller, which
                               decides what to tell the user.  ServiceError
                               subclasses mirror the HTTP status of the reply;
                               TransportError means no reply arrived at all.
  - MalformedResponseError   → FAIL HARD, but only when the reply has no text body.
                               Missing sections inside a text reply are NOT errors;
                               the parser falls back to field defaults.
"""

from typing import Optional


class BiasLensError(Exception):
    """Base exception for all bias_lens errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict:
        """Convert to the error payload handed to the orchestration layer."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# --- Extraction ---

class InsufficientContentError(BiasLensError):
    """Raised when no extraction strategy yields enough text."""

    def __init__(self, message: str, content_length: int, min_length: int):
        super().__init__(
            message,
            details={"content_length": content_length, "min_length": min_length}
        )
        self.content_length = content_length
        self.min_length = min_length


# --- Analysis client ---

class AnalysisClientError(BiasLensError):
    """Base class for failures talking to the analysis service."""
    pass


class NotConfiguredError(AnalysisClientError):
    """No API key is available. A valid state, but nothing can be analyzed."""

    def __init__(self, message: str = "Please configure your Claude API key in the settings."):
        super().__init__(message)


class TransportError(AnalysisClientError):
    """The request never produced an HTTP response (network failure, timeout)."""
    pass


class ServiceError(AnalysisClientError):
    """The service answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message, details={"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class UnauthorizedError(ServiceError):
    """
    401 from the service.

    configuration_error is True when the body points at a cross-origin (CORS)
    problem: the key may be fine but the request headers are not.
    """

    def __init__(self, message: str, status_code: int = 401, body: str = "",
                 configuration_error: bool = False):
        super().__init__(message, status_code, body)
        self.configuration_error = configuration_error
        self.details["configuration_error"] = configuration_error


class ForbiddenError(ServiceError):
    """403 from the service."""
    pass


class RateLimitedError(ServiceError):
    """429 from the service."""
    pass


class ServiceFaultError(ServiceError):
    """500 from the service."""
    pass


class UnknownServiceError(ServiceError):
    """Any other non-success status."""
    pass


# --- Response parsing ---

class MalformedResponseError(BiasLensError):
    """Raised when the service reply has no extractable text body."""
    pass
