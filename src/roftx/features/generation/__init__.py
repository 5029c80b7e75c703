"""Text generation feature."""

from src.roftx.features.generation.handlers import router

__all__ = ["router"]
