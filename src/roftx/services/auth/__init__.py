"""Google identity verification and user reconciliation."""

from src.roftx.services.auth.exceptions import (
    AudienceMismatchError,
    AuthenticationError,
    ExpiredTokenError,
    InvalidTokenError,
    UntrustedIssuerError,
    VerificationTimeoutError,
)
from src.roftx.services.auth.jwks import JWKSCache
from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.auth.reconciler import IdentityReconciler
from src.roftx.services.auth.token_verifier import GOOGLE_ISSUERS, TokenVerifier

__all__ = [
    "AudienceMismatchError",
    "AuthenticationError",
    "ExpiredTokenError",
    "InvalidTokenError",
    "UntrustedIssuerError",
    "VerificationTimeoutError",
    "GOOGLE_ISSUERS",
    "IdentityReconciler",
    "JWKSCache",
    "TokenVerifier",
    "VerifiedClaims",
]
