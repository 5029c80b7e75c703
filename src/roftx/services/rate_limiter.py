"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.roftx.config import settings

logger = logging.getLogger(__name__)


def get_client_key(request: Request) -> str:
    """
    Rate limit key for a request.

    Login and generation callers are not authenticated yet when the limit
    is checked, so every limit is per client IP.
    """
    return f"ip:{get_remote_address(request)}"


# In-memory storage; each instance enforces its own window
limiter = Limiter(
    key_func=get_client_key,
    default_limits=[],
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """Rate limit tiers for different endpoint categories."""

    # Sign-in attempts
    AUTH = ["10 per minute", "100 per hour"]

    # Provider-backed generation
    LLM_HEAVY = ["20 per minute", "200 per hour"]

    # Cheap reads
    PUBLIC = ["60 per minute", "1000 per hour"]


# Note: decorated endpoints must take a 'request: Request' parameter (slowapi requirement)
auth_rate_limit = limiter.limit(";".join(RateLimitTiers.AUTH))
llm_heavy_rate_limit = limiter.limit(";".join(RateLimitTiers.LLM_HEAVY))
public_rate_limit = limiter.limit(";".join(RateLimitTiers.PUBLIC))
