"""Custom exceptions for identity verification."""


class AuthenticationError(Exception):
    """Base class for identity assertion failures.

    Every subclass carries a stable ``code`` and the HTTP status the gateway
    should answer with. The message shown to callers is always the generic
    ``public_message``; ``str(exc)`` holds the internal detail for logs.
    """

    code = "authentication_failed"
    status_code = 401
    public_message = "Invalid token or authentication failed. Please sign in again."


class InvalidTokenError(AuthenticationError):
    """Raised when the assertion is empty, malformed, or missing required claims."""

    code = "invalid_token"


class UntrustedIssuerError(AuthenticationError):
    """Raised when the signature or issuer does not match a trusted issuer."""

    code = "untrusted_issuer"


class ExpiredTokenError(AuthenticationError):
    """Raised when the assertion's validity window has passed."""

    code = "expired_token"


class AudienceMismatchError(AuthenticationError):
    """Raised when the audience claim is not this service's client id."""

    code = "audience_mismatch"


class VerificationTimeoutError(AuthenticationError):
    """Raised when verification (including key fetch) exceeds its time budget."""

    code = "verification_timeout"
    status_code = 504
    public_message = "Sign-in is taking longer than expected. Please try again."
