"""Google sign-in feature."""

from src.roftx.features.auth.handlers import router

__all__ = ["router"]
