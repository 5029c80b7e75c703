"""
LLM generation proxy.

Proxies one-shot prompts to the configured provider and normalizes the
provider's response into a GenerationResult.

Available providers:
- gemini: Google Gemini generateContent
- anthropic: Anthropic Messages
- openai: OpenAI-compatible Chat Completions

Usage:
    >>> from src.roftx.services.llm import get_generation_proxy
    >>> proxy = get_generation_proxy()
    >>> result = await proxy.generate(GenerationRequest(prompt="Hello"))
"""

import httpx

from src.roftx.config import Settings, settings
from src.roftx.services.llm.exceptions import (
    GenerationError,
    InvalidRequestError,
    ProviderAuthError,
    ProviderError,
    ProviderProtocolError,
    ProviderUnavailableError,
    RateLimitedError,
)
from src.roftx.services.llm.extraction import extract_text
from src.roftx.services.llm.proxy import GenerationProxy
from src.roftx.services.llm.schemas import GenerationRequest, GenerationResult
from src.roftx.services.llm.tiers import GenerationConfig, TierProfile, build_generation_config


def get_generation_proxy(
    app_settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> GenerationProxy:
    """
    Factory function to build a GenerationProxy from settings.

    Args:
        app_settings: Settings to read (defaults to the module-level settings)
        http_client: Optional HTTP client

    Returns:
        Configured GenerationProxy

    Raises:
        ValueError: If provider not supported or API key not found
    """
    config = build_generation_config(app_settings or settings)
    if not config.api_key:
        raise ValueError(f"API key not found for provider: {config.provider}")
    return GenerationProxy(config, http_client=http_client)


__all__ = [
    "get_generation_proxy",
    "extract_text",
    "GenerationConfig",
    "GenerationProxy",
    "GenerationRequest",
    "GenerationResult",
    "TierProfile",
    "build_generation_config",
    "GenerationError",
    "InvalidRequestError",
    "ProviderAuthError",
    "ProviderError",
    "ProviderProtocolError",
    "ProviderUnavailableError",
    "RateLimitedError",
]
