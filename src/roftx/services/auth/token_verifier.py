"""Local Google ID token verification using JWKS for signature validation."""

import asyncio
import logging
from typing import Any

import httpx
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWKError, JWTClaimsError

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

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class TokenVerifier:
    """
    Verifies Google ID tokens against Google's published signing keys.

    Validates signature, expiration, issuer, and audience, and translates
    every python-jose failure into the identity failure taxonomy so callers
    never see library exceptions.

    Attributes:
        jwks_cache: JWKS cache instance for fetching signing keys
        audience: Expected audience (this service's OAuth client id)
        issuers: Accepted issuer values
        leeway: Clock skew tolerance in seconds (default: 10)
        timeout: Upper bound in seconds for a single verification

    Example:
        >>> verifier = TokenVerifier(jwks_cache, audience="1234.apps.googleusercontent.com")
        >>> claims = await verifier.verify(id_token)
        >>> claims.subject
    """

    def __init__(
        self,
        jwks_cache: JWKSCache,
        audience: str,
        issuers: tuple[str, ...] | list[str] = GOOGLE_ISSUERS,
        leeway: int = 10,
        timeout: float = 10.0,
    ):
        if not audience:
            raise ValueError("audience (Google client id) is required")

        self.jwks_cache = jwks_cache
        self.audience = audience
        self.issuers = tuple(issuers)
        self.leeway = leeway
        self.timeout = timeout

    async def verify(self, assertion: str) -> VerifiedClaims:
        """
        Verify an ID token and return its identity claims.

        Args:
            assertion: Raw ID token string as issued by Google

        Returns:
            VerifiedClaims for the token's subject

        Raises:
            InvalidTokenError: Empty, malformed, or missing required claims
            UntrustedIssuerError: Unknown signing key, bad signature, or wrong issuer
            ExpiredTokenError: Token expired
            AudienceMismatchError: Token issued for another client
            VerificationTimeoutError: Key fetch did not complete in time
        """
        if not isinstance(assertion, str) or not assertion.strip():
            raise InvalidTokenError("Assertion must be a non-empty string")

        try:
            claims = await asyncio.wait_for(self._decode(assertion.strip()), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                "ID token verification timed out",
                extra={"error_type": "verification_timeout", "timeout": self.timeout},
            )
            raise VerificationTimeoutError(
                f"Verification exceeded {self.timeout}s"
            ) from e
        except AuthenticationError as e:
            logger.warning(
                f"ID token verification failed: {e}",
                extra={"error_type": e.code},
            )
            raise

        if not claims.get("sub"):
            raise InvalidTokenError("Verified token has no 'sub' claim")

        verified = VerifiedClaims.from_token_claims(claims)
        logger.debug(
            "ID token verified successfully",
            extra={"subject": verified.subject, "exp": claims.get("exp")},
        )
        return verified

    async def _decode(self, token: str) -> dict[str, Any]:
        try:
            unverified_header = jwt.get_unverified_header(token)
            unverified_claims = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise InvalidTokenError(f"Malformed token: {e}") from e

        kid = unverified_header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise InvalidTokenError("JWT header missing 'kid' (key ID) or it is not a string")

        try:
            signing_key = await self.jwks_cache.get_signing_key(kid)
        except httpx.TimeoutException as e:
            raise VerificationTimeoutError(f"Timed out fetching issuer keys: {e}") from e
        except httpx.HTTPError as e:
            raise VerificationTimeoutError(f"Issuer keys unavailable: {e}") from e
        except (ValueError, JWKError) as e:
            raise VerificationTimeoutError(f"Issuer keys unreadable: {e}") from e

        try:
            return jwt.decode(
                token,
                signing_key,
                algorithms=["RS256", "ES256"],
                audience=self.audience,
                issuer=self.issuers,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "require_exp": True,
                    "require_iat": True,
                    "leeway": self.leeway,
                },
            )
        except ExpiredSignatureError as e:
            raise ExpiredTokenError(str(e)) from e
        except JWTClaimsError as e:
            raise self._classify_claims_error(unverified_claims, e) from e
        except JWTError as e:
            # Header and payload already parsed, so this is a signature failure
            raise UntrustedIssuerError(f"Signature verification failed: {e}") from e

    def _classify_claims_error(
        self, unverified_claims: dict[str, Any], error: JWTClaimsError
    ) -> AuthenticationError:
        if unverified_claims.get("iss") not in self.issuers:
            return UntrustedIssuerError(f"Untrusted issuer: {unverified_claims.get('iss')!r}")

        aud = unverified_claims.get("aud")
        audiences = aud if isinstance(aud, list) else [aud]
        if self.audience not in audiences:
            return AudienceMismatchError(f"Audience {aud!r} does not match client id")

        return InvalidTokenError(f"Invalid claims: {error}")
