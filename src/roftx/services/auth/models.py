"""Data models for authentication."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class VerifiedClaims(BaseModel):
    """
    Identity claims extracted from a verified Google ID token.

    Request-scoped: produced by TokenVerifier and consumed by the
    IdentityReconciler. Never persisted as-is.

    Attributes:
        subject: Stable Google account id from the 'sub' claim
        email: Account email from the 'email' claim
        full_name: Display name from the 'name' claim
        given_name: First name from the 'given_name' claim
        family_name: Last name from the 'family_name' claim
        picture_url: Avatar URL from the 'picture' claim
        locale: Locale tag from the 'locale' claim
        email_verified: Whether Google verified the email address

    Example:
        >>> claims = VerifiedClaims.from_token_claims(
        ...     {"sub": "1081...", "email": "ada@example.com", "name": "Ada Lovelace"}
        ... )
        >>> claims.subject
        '1081...'
    """

    model_config = ConfigDict(frozen=True)

    subject: str
    email: str | None = None
    full_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture_url: str | None = None
    locale: str | None = None
    email_verified: bool | None = None

    @classmethod
    def from_token_claims(cls, claims: dict[str, Any]) -> "VerifiedClaims":
        """Map raw Google ID token claims onto the profile field names."""
        return cls(
            subject=str(claims["sub"]),
            email=claims.get("email"),
            full_name=claims.get("name"),
            given_name=claims.get("given_name"),
            family_name=claims.get("family_name"),
            picture_url=claims.get("picture"),
            locale=claims.get("locale"),
            email_verified=claims.get("email_verified"),
        )
