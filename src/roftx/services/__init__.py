"""Shared services module for external integrations."""

from src.roftx.services.analytics import PostHogService

__all__ = [
    "PostHogService",
]
