"""Custom exceptions for the generation proxy."""

from typing import Any


class GenerationError(Exception):
    """Base exception for all generation failures.

    ``public_message`` is what the gateway may show callers. Provider
    payloads and credentials stay in ``str(exc)`` and attributes for logs.
    """

    code = "generation_failed"
    status_code = 502
    public_message = "The text generation service failed. Please try again."


class InvalidRequestError(GenerationError):
    """Raised when the prompt is rejected locally or the provider answers 400."""

    code = "invalid_request"
    status_code = 400
    public_message = "The generation request was invalid."


class ProviderUnavailableError(GenerationError):
    """Raised on connection failures and timeouts talking to the provider."""

    code = "provider_unavailable"
    status_code = 503
    public_message = "The text generation service is unavailable. Please try again later."


class ProviderProtocolError(GenerationError):
    """Raised when the provider body cannot be decoded as JSON."""

    code = "provider_protocol_error"


class ProviderAuthError(GenerationError):
    """Raised when the provider rejects our credentials (a deployment defect)."""

    code = "provider_auth_error"


class RateLimitedError(GenerationError):
    """Raised when the provider answers 429."""

    code = "rate_limited"
    status_code = 429
    public_message = "Too many generation requests. Please wait and try again."

    def __init__(self, message: str, retry_after: str | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ProviderError(GenerationError):
    """Raised for any other non-2xx provider status."""

    code = "provider_error"

    def __init__(self, message: str, status: int, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload
