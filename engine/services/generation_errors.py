"""
Error taxonomy for the website generation pipeline.

Every failure the gateway can produce is a GenerationError subclass carrying
the HTTP status it maps to. The same classes are rebuilt on the client side
from HTTP responses with error_for_status().
"""
from typing import Any, Dict, Optional


class GenerationError(Exception):
    """Base class for terminal generation failures"""

    status_code: int = 500
    default_message: str = "Generation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidInputError(GenerationError):
    status_code = 400
    default_message = "Invalid prompt"


class UnauthenticatedError(GenerationError):
    status_code = 401
    default_message = "Not authenticated"


class InsufficientCreditsError(GenerationError):
    status_code = 402
    default_message = "Insufficient credits"


class RateLimitedError(GenerationError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class LedgerUnavailableError(GenerationError):
    status_code = 500
    default_message = "Failed to check credits"


class UpstreamError(GenerationError):
    status_code = 500
    default_message = "AI provider request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None
    ):
        self.upstream_status = upstream_status
        if upstream_status is not None and message is None:
            message = f"AI API error: {upstream_status}"
        super().__init__(message, details)


class MalformedModelResponseError(GenerationError):
    status_code = 500
    default_message = "Failed to parse AI response. Please try again with a different prompt."


_STATUS_TO_ERROR = {
    400: InvalidInputError,
    401: UnauthenticatedError,
    402: InsufficientCreditsError,
    429: RateLimitedError,
}


def error_for_status(
    status_code: int,
    message: Optional[str] = None,
    details: Optional[str] = None
) -> GenerationError:
    """Rebuild a GenerationError from an HTTP status and error body"""
    error_cls = _STATUS_TO_ERROR.get(status_code)
    if error_cls is not None:
        return error_cls(message, details)
    return UpstreamError(
        message or f"Request failed with status {status_code}",
        details,
        upstream_status=status_code
    )
