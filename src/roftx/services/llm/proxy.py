"""One-shot generation proxy to the configured LLM provider."""

import asyncio
import logging
from typing import Any

import httpx

from src.roftx.services.llm.exceptions import (
    InvalidRequestError,
    ProviderAuthError,
    ProviderError,
    ProviderProtocolError,
    ProviderUnavailableError,
    RateLimitedError,
)
from src.roftx.services.llm.extraction import extract_text, extract_usage
from src.roftx.services.llm.providers import ProviderAdapter, get_provider_adapter
from src.roftx.services.llm.schemas import GenerationRequest, GenerationResult
from src.roftx.services.llm.tiers import GenerationConfig

logger = logging.getLogger(__name__)


class GenerationProxy:
    """
    Proxies a normalized generation request to the configured provider.

    Steps per call:
    1. Reject empty or over-length prompts before any network call
    2. Resolve the tier (unknown tiers fall back to the default tier)
    3. Translate to the provider's wire format
    4. POST with a bounded timeout
    5. Decode the body as JSON
    6. Map failure statuses onto the error taxonomy
    7. Extract the text with the ordered response matchers

    Provider calls are never retried here; callers own retry and backoff.

    Example:
        >>> proxy = GenerationProxy(config)
        >>> result = await proxy.generate(GenerationRequest(prompt="Hello", tier="pro"))
        >>> result.text
    """

    def __init__(
        self,
        config: GenerationConfig,
        http_client: httpx.AsyncClient | None = None,
        adapter: ProviderAdapter | None = None,
    ):
        """
        Initialize the proxy.

        Args:
            config: Immutable generation configuration
            http_client: Optional HTTP client (tests pass one with a mock transport)
            adapter: Optional provider adapter (defaults to config.provider's adapter)

        Raises:
            ValueError: If the provider is unsupported or has no API key
        """
        self.config = config
        self.adapter = adapter or get_provider_adapter(
            config.provider, api_key=config.api_key, base_url=config.base_url
        )
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds, connect=10.0)
        )

        logger.info(
            f"Initialized GenerationProxy: provider={self.adapter.name}, "
            f"default_tier={config.default_tier}, timeout={config.timeout_seconds}s"
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate text for a single prompt.

        Args:
            request: Prompt and optional tier

        Returns:
            GenerationResult; ``text`` is "" when no response shape matched

        Raises:
            InvalidRequestError: Empty/over-length prompt, or provider answered 400
            ProviderUnavailableError: Connection failure or timeout
            ProviderProtocolError: Provider body is not JSON
            ProviderAuthError: Provider rejected our credentials
            RateLimitedError: Provider answered 429
            ProviderError: Any other non-2xx status
        """
        prompt = request.prompt
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt must not be empty")
        if len(prompt) > self.config.max_prompt_chars:
            raise InvalidRequestError(
                f"Prompt is {len(prompt)} characters; the limit is {self.config.max_prompt_chars}"
            )

        tier = self.config.resolve_tier(request.tier)
        url = self.adapter.build_url(tier)
        payload = self.adapter.build_payload(prompt, tier)

        logger.debug(
            f"Sending generation request: {prompt[:100]}...",
            extra={"provider": self.adapter.name, "tier": tier.name, "model": tier.model},
        )

        response = await self._post(url, payload)
        envelope = self._decode(response)
        self._raise_for_status(response, envelope)

        text = extract_text(envelope)
        if not text:
            logger.warning(
                "Provider response matched no known shape; returning empty text",
                extra={"provider": self.adapter.name, "model": tier.model},
            )

        usage = extract_usage(envelope)
        logger.info(
            "Generated response",
            extra={
                "provider": self.adapter.name,
                "tier": tier.name,
                "model": tier.model,
                "chars": len(text),
            },
        )
        return GenerationResult(text=text, usage=usage, model=tier.model, tier=tier.name)

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self._http_client.post(url, headers=self.adapter.build_headers(), json=payload),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                f"Provider call timed out after {self.config.timeout_seconds}s",
                extra={"error_type": "provider_timeout", "provider": self.adapter.name},
            )
            raise ProviderUnavailableError(f"Provider timed out: {e!r}") from e
        except httpx.TransportError as e:
            logger.warning(
                f"Provider transport failure: {e!r}",
                extra={"error_type": "provider_transport_error", "provider": self.adapter.name},
            )
            raise ProviderUnavailableError(f"Provider unreachable: {e!r}") from e

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"Provider returned undecodable body (status {response.status_code})",
                extra={"error_type": "provider_protocol_error", "provider": self.adapter.name},
            )
            raise ProviderProtocolError(
                f"Provider body is not JSON (status {response.status_code})"
            ) from e

    def _raise_for_status(self, response: httpx.Response, envelope: Any) -> None:
        status = response.status_code
        if response.is_success:
            return

        extra = {"provider": self.adapter.name, "status": status}
        if status == 429:
            logger.warning("Provider rate limited the request", extra=extra)
            raise RateLimitedError(
                "Provider rate limit exceeded", retry_after=response.headers.get("Retry-After")
            )
        if status in (401, 403):
            # The payload may echo key fragments, so it stays out of the exception
            logger.error("Provider rejected credentials; check the configured API key", extra=extra)
            raise ProviderAuthError(f"Provider authentication failed (status {status})")
        if status == 400:
            logger.warning(f"Provider rejected request: {envelope}", extra=extra)
            raise InvalidRequestError(f"Provider rejected request: {envelope}")

        logger.error(f"Provider error {status}: {envelope}", extra=extra)
        raise ProviderError(f"Provider returned status {status}", status=status, payload=envelope)

    async def close(self) -> None:
        """Close HTTP client. Called during application shutdown."""
        await self._http_client.aclose()
        logger.info("Generation proxy closed")
