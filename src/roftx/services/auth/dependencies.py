"""FastAPI dependencies for token verification and identity reconciliation."""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.roftx.services.auth.exceptions import InvalidTokenError
from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.auth.reconciler import IdentityReconciler
from src.roftx.services.auth.token_verifier import TokenVerifier

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Global instances (initialized in main.py startup)
_token_verifier: TokenVerifier | None = None
_identity_reconciler: IdentityReconciler | None = None


def set_token_verifier(verifier: TokenVerifier | None) -> None:
    """Set the global TokenVerifier. Called during application startup."""
    global _token_verifier
    _token_verifier = verifier


def get_token_verifier() -> TokenVerifier:
    """
    Get the global TokenVerifier.

    Raises:
        RuntimeError: If the verifier was not initialized
    """
    if _token_verifier is None:
        raise RuntimeError(
            "Token verifier not initialized. "
            "Ensure application startup calls set_token_verifier()."
        )
    return _token_verifier


def set_identity_reconciler(reconciler: IdentityReconciler | None) -> None:
    """Set the global IdentityReconciler. Called during application startup."""
    global _identity_reconciler
    _identity_reconciler = reconciler


def get_identity_reconciler() -> IdentityReconciler:
    """
    Get the global IdentityReconciler.

    Raises:
        RuntimeError: If the reconciler was not initialized
    """
    if _identity_reconciler is None:
        raise RuntimeError(
            "Identity reconciler not initialized. "
            "Ensure application startup calls set_identity_reconciler()."
        )
    return _identity_reconciler


async def get_verified_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> VerifiedClaims:
    """
    Verify the Google ID token sent as a Bearer credential.

    Raises:
        AuthenticationError: Missing or invalid token (mapped to 401 by the app)
    """
    if credentials is None:
        raise InvalidTokenError("Missing Authorization header")
    return await verifier.verify(credentials.credentials)
