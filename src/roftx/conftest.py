"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.roftx.main import app
from src.roftx.services.rate_limiter import limiter


@pytest.fixture(autouse=True)
def disable_rate_limits():
    """Keep the in-memory rate limit windows from leaking between tests."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def client() -> TestClient:
    """
    Provide FastAPI test client for API testing.

    The client is not used as a context manager, so the lifespan (JWKS fetch,
    startup validation) does not run; tests install their own collaborators.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    return TestClient(app)
