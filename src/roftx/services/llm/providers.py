"""Wire formats for the supported LLM providers."""

from abc import ABC, abstractmethod
from typing import Any

from src.roftx.services.llm.tiers import TierProfile


class ProviderAdapter(ABC):
    """
    Translates a prompt and tier into one provider's HTTP request.

    Adapters only build requests; sending, status mapping and response
    extraction are shared by GenerationProxy.
    """

    name: str
    default_base_url: str

    def __init__(self, api_key: str, base_url: str = ""):
        if not api_key:
            raise ValueError(f"API key is required for provider: {self.name}")
        self.api_key = api_key
        self.base_url = (base_url or self.default_base_url).rstrip("/")

    @abstractmethod
    def build_url(self, tier: TierProfile) -> str:
        """Endpoint for a single-turn generation with the tier's model."""

    @abstractmethod
    def build_headers(self) -> dict[str, str]:
        """Request headers, including credentials."""

    @abstractmethod
    def build_payload(self, prompt: str, tier: TierProfile) -> dict[str, Any]:
        """Request body: one user message plus model and limits."""


class GeminiAdapter(ProviderAdapter):
    """Google Gemini generateContent API."""

    name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def build_url(self, tier: TierProfile) -> str:
        return f"{self.base_url}/models/{tier.model}:generateContent"

    def build_headers(self) -> dict[str, str]:
        # Credential goes in a header, never the query string
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

    def build_payload(self, prompt: str, tier: TierProfile) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": tier.max_output_tokens,
                "temperature": tier.temperature,
            },
        }


class AnthropicAdapter(ProviderAdapter):
    """Anthropic Messages API."""

    name = "anthropic"
    default_base_url = "https://api.anthropic.com/v1"
    api_version = "2023-06-01"

    def build_url(self, tier: TierProfile) -> str:
        return f"{self.base_url}/messages"

    def build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }

    def build_payload(self, prompt: str, tier: TierProfile) -> dict[str, Any]:
        return {
            "model": tier.model,
            "max_tokens": tier.max_output_tokens,
            "temperature": tier.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }


class OpenAIAdapter(ProviderAdapter):
    """OpenAI-compatible Chat Completions API."""

    name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def build_url(self, tier: TierProfile) -> str:
        return f"{self.base_url}/chat/completions"

    def build_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    def build_payload(self, prompt: str, tier: TierProfile) -> dict[str, Any]:
        return {
            "model": tier.model,
            "max_tokens": tier.max_output_tokens,
            "temperature": tier.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }


# Provider registry
PROVIDER_ADAPTERS: dict[str, type[ProviderAdapter]] = {
    "gemini": GeminiAdapter,
    "anthropic": AnthropicAdapter,
    "openai": OpenAIAdapter,
}


def get_provider_adapter(provider_name: str, api_key: str, base_url: str = "") -> ProviderAdapter:
    """
    Create the adapter for a provider.

    Raises:
        ValueError: If provider not supported or API key missing
    """
    if provider_name not in PROVIDER_ADAPTERS:
        raise ValueError(
            f"Unsupported LLM provider: {provider_name}. Supported: {list(PROVIDER_ADAPTERS.keys())}"
        )
    return PROVIDER_ADAPTERS[provider_name](api_key=api_key, base_url=base_url)
