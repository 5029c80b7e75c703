"""FastAPI dependencies for the generation proxy."""

from src.roftx.services.llm.proxy import GenerationProxy

# Global proxy instance (initialized in main.py startup)
_generation_proxy: GenerationProxy | None = None


def set_generation_proxy(proxy: GenerationProxy | None) -> None:
    """Set the global GenerationProxy. Called during application startup."""
    global _generation_proxy
    _generation_proxy = proxy


def get_active_generation_proxy() -> GenerationProxy:
    """
    Get the global GenerationProxy.

    Raises:
        RuntimeError: If the proxy was not initialized
    """
    if _generation_proxy is None:
        raise RuntimeError(
            "Generation proxy not initialized. "
            "Ensure application startup calls set_generation_proxy()."
        )
    return _generation_proxy
