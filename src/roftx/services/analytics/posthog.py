"""PostHog analytics service for event tracking."""

import posthog

from src.roftx.config import settings


class PostHogService:
    """Service for tracking analytics events via PostHog. No-op without an API key."""

    def __init__(self) -> None:
        if settings.posthog_api_key:
            posthog.api_key = settings.posthog_api_key
            posthog.host = settings.posthog_host

    def capture(self, distinct_id: str, event: str, properties: dict | None = None) -> None:
        """
        Track an event.

        Args:
            distinct_id: Unique identifier for the user (Google subject or "anonymous")
            event: Event name (e.g., "user_login", "authentication_failed")
            properties: Optional event properties

        Example:
            >>> PostHogService().capture("1081...", "user_login", {"locale": "en"})
        """
        if not settings.posthog_api_key:
            return

        posthog.capture(distinct_id=distinct_id, event=event, properties=properties or {})

    def identify(self, distinct_id: str, properties: dict | None = None) -> None:
        """Attach person properties (email, name) to a user."""
        if not settings.posthog_api_key:
            return

        posthog.set(distinct_id=distinct_id, properties=properties or {})
