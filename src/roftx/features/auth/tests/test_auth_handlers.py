"""Tests for Google sign-in handlers."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from src.roftx.services.auth.dependencies import set_identity_reconciler, set_token_verifier
from src.roftx.services.auth.exceptions import (
    AudienceMismatchError,
    ExpiredTokenError,
    VerificationTimeoutError,
)
from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.database.dependencies import set_user_store
from src.roftx.services.database.exceptions import PersistenceFailure
from src.roftx.services.database.models import UserProfile

LOGIN_URL = "/api/auth/google"


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        id=7,
        google_id="108123456789012345678",
        email="ada@example.com",
        full_name="Ada Lovelace",
        given_name="Ada",
        family_name="Lovelace",
        picture_url="https://lh3.googleusercontent.com/a/photo",
        locale="en",
        last_login=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
        created_at=datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture(autouse=True)
def mock_posthog():
    """Auto-mock PostHogService for all tests."""
    with patch("src.roftx.features.auth.handlers.PostHogService") as mock:
        mock_instance = Mock()
        mock.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def mock_reconciler(profile):
    reconciler = Mock()
    reconciler.reconcile = AsyncMock(return_value=profile)
    return reconciler


@pytest.fixture
def mock_verifier():
    verifier = Mock()
    verifier.verify = AsyncMock(return_value=VerifiedClaims(subject="108123456789012345678"))
    return verifier


@pytest.fixture
def mock_store(profile):
    store = Mock()
    store.find_by_subject = Mock(return_value=profile)
    return store


@pytest.fixture(autouse=True)
def setup_dependencies(mock_reconciler, mock_verifier, mock_store):
    set_identity_reconciler(mock_reconciler)
    set_token_verifier(mock_verifier)
    set_user_store(mock_store)
    yield
    set_identity_reconciler(None)
    set_token_verifier(None)
    set_user_store(None)


class TestGoogleLogin:
    """Tests for POST /api/auth/google."""

    def test_success_returns_user_row(self, client: TestClient, mock_reconciler, mock_posthog):
        response = client.post(LOGIN_URL, json={"token": "id-token"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful!"
        assert body["user"]["google_id"] == "108123456789012345678"
        assert body["user"]["id"] == 7
        assert body["user"]["email"] == "ada@example.com"
        mock_reconciler.reconcile.assert_awaited_once_with("id-token")
        mock_posthog.capture.assert_called_once()
        assert mock_posthog.capture.call_args.kwargs["event"] == "user_login"

    def test_first_login_reports_user_created(
        self, client: TestClient, mock_reconciler, mock_posthog, profile
    ):
        mock_reconciler.reconcile = AsyncMock(
            return_value=profile.model_copy(update={"created": True})
        )

        response = client.post(LOGIN_URL, json={"token": "id-token"})

        assert response.status_code == 200
        assert mock_posthog.capture.call_args.kwargs["event"] == "user_created"
        assert "created" not in response.json()["user"]

    @pytest.mark.parametrize("body", [{}, {"token": ""}, {"token": None}])
    def test_missing_token_is_bad_request(self, client: TestClient, mock_reconciler, body):
        response = client.post(LOGIN_URL, json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "No token provided."
        mock_reconciler.reconcile.assert_not_awaited()

    def test_no_body_is_bad_request(self, client: TestClient):
        response = client.post(LOGIN_URL)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "error, code",
        [
            (ExpiredTokenError("expired at 123"), "expired_token"),
            (AudienceMismatchError("aud other-client"), "audience_mismatch"),
        ],
    )
    def test_auth_failure_is_401_without_detail(
        self, client: TestClient, mock_reconciler, mock_posthog, error, code
    ):
        mock_reconciler.reconcile.side_effect = error

        response = client.post(LOGIN_URL, json={"token": "id-token"})

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == code
        assert "sign in again" in body["error"]
        assert str(error) not in body["error"]
        assert mock_posthog.capture.call_args.kwargs["event"] == "authentication_failed"

    def test_verification_timeout_is_504(self, client: TestClient, mock_reconciler):
        mock_reconciler.reconcile.side_effect = VerificationTimeoutError("slow")

        response = client.post(LOGIN_URL, json={"token": "id-token"})

        assert response.status_code == 504
        assert response.json()["code"] == "verification_timeout"

    def test_persistence_failure_is_503(self, client: TestClient, mock_reconciler):
        mock_reconciler.reconcile.side_effect = PersistenceFailure("db password wrong")

        response = client.post(LOGIN_URL, json={"token": "id-token"})

        assert response.status_code == 503
        assert response.json()["code"] == "persistence_failure"
        assert "password" not in response.json()["error"]


class TestGetMe:
    """Tests for GET /api/auth/me."""

    def test_returns_stored_profile(self, client: TestClient, mock_reconciler, mock_verifier, mock_store):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer id-token"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ada@example.com"
        mock_verifier.verify.assert_awaited_once_with("id-token")
        mock_store.find_by_subject.assert_called_once_with("108123456789012345678")
        mock_reconciler.reconcile.assert_not_awaited()

    def test_unknown_subject_is_404(self, client: TestClient, mock_store):
        mock_store.find_by_subject.return_value = None

        response = client.get("/api/auth/me", headers={"Authorization": "Bearer id-token"})

        assert response.status_code == 404

    def test_missing_credentials_is_401(self, client: TestClient):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "invalid_token"

    def test_verification_failure_is_401(self, client: TestClient, mock_verifier, mock_store):
        mock_verifier.verify.side_effect = ExpiredTokenError("expired")

        response = client.get("/api/auth/me", headers={"Authorization": "Bearer id-token"})

        assert response.status_code == 401
        mock_store.find_by_subject.assert_not_called()
