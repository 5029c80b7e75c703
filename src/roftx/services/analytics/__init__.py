"""Product analytics."""

from src.roftx.services.analytics.posthog import PostHogService

__all__ = ["PostHogService"]
