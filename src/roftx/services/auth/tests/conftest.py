"""Shared fixtures for identity verification tests."""

import time
from datetime import datetime
from itertools import count
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.database.models import UserProfile

CLIENT_ID = "1234-test.apps.googleusercontent.com"
KID = "key-1"


def _generate_rsa_pems() -> tuple[str, str]:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def rsa_keys() -> tuple[str, str]:
    """Provide a (private_pem, public_pem) pair used to sign test tokens."""
    return _generate_rsa_pems()


@pytest.fixture(scope="session")
def other_rsa_keys() -> tuple[str, str]:
    """Provide a second key pair the verifier does not trust."""
    return _generate_rsa_pems()


@pytest.fixture
def google_claims() -> dict[str, Any]:
    """Provide claims shaped like a Google ID token."""
    now = int(time.time())
    return {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "108123456789012345678",
        "email": "ada@example.com",
        "email_verified": True,
        "name": "Ada Lovelace",
        "given_name": "Ada",
        "family_name": "Lovelace",
        "picture": "https://lh3.googleusercontent.com/a/photo",
        "locale": "en",
        "iat": now,
        "exp": now + 3600,
    }


@pytest.fixture
def make_token(rsa_keys):
    """Factory that signs claims into an RS256 token with the given kid."""

    def _make(claims: dict[str, Any], private_pem: str | None = None, kid: str | None = KID) -> str:
        headers = {"kid": kid} if kid else None
        return jwt.encode(claims, private_pem or rsa_keys[0], algorithm="RS256", headers=headers)

    return _make


@pytest.fixture
def mock_jwks_cache(rsa_keys):
    """Provide a JWKS cache that serves the trusted public key."""
    cache = Mock()
    cache.get_signing_key = AsyncMock(return_value=jwk.construct(rsa_keys[1], algorithm="RS256"))
    return cache


@pytest.fixture
def verified_claims() -> VerifiedClaims:
    """Provide verified claims for reconciler tests."""
    return VerifiedClaims(
        subject="108123456789012345678",
        email="ada@example.com",
        full_name="Ada Lovelace",
        given_name="Ada",
        family_name="Lovelace",
        picture_url="https://lh3.googleusercontent.com/a/photo",
        locale="en",
    )


class FakeUserStore:
    """
    In-memory user store with the same unique-subject upsert semantics as
    the reconcile_user_login SQL function.
    """

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.upsert_calls = 0
        self._ids = count(1)

    def find_by_subject(self, subject: str) -> UserProfile | None:
        row = self.rows.get(subject)
        return UserProfile.model_validate(row) if row else None

    def upsert(self, claims: VerifiedClaims, now: datetime) -> UserProfile:
        self.upsert_calls += 1
        row = self.rows.get(claims.subject)
        created = row is None
        if created:
            row = {
                "id": next(self._ids),
                "google_id": claims.subject,
                "email": claims.email,
                "full_name": claims.full_name,
                "given_name": claims.given_name,
                "family_name": claims.family_name,
                "picture_url": claims.picture_url,
                "locale": claims.locale,
                "last_login": now,
                "created_at": now,
            }
            self.rows[claims.subject] = row
        else:
            row["last_login"] = max(row["last_login"], now)
            row["full_name"] = claims.full_name
            row["picture_url"] = claims.picture_url
        return UserProfile.model_validate({**row, "created": created})


@pytest.fixture
def fake_user_store() -> FakeUserStore:
    """Provide an empty in-memory user store."""
    return FakeUserStore()
