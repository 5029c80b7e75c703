"""JWKS (JSON Web Key Set) fetching and caching for Google ID token verification."""

import asyncio
import logging
from datetime import datetime, timezone

import httpx
from jose import jwk
from jose.backends.base import Key

from src.roftx.services.auth.exceptions import UntrustedIssuerError

logger = logging.getLogger(__name__)


class JWKSCache:
    """
    Manages JWKS fetching and caching with automatic refresh.

    Fetches Google's public signing keys and caches them in-memory with a TTL.
    Refreshes when the cache expires or when an unknown key ID is encountered
    (Google rotates its keys roughly daily). Concurrent refreshes are
    coalesced behind a lock so a burst of logins triggers one fetch.

    Attributes:
        jwks_url: URL to fetch JWKS from
        cache_ttl: Cache time-to-live in seconds (default: 3600 = 1 hour)
        _keys: Cached keys dictionary (kid -> key)
        _last_refresh: Timestamp of last successful JWKS fetch
        _http_client: HTTP client for fetching JWKS

    Example:
        >>> cache = JWKSCache("https://www.googleapis.com/oauth2/v3/certs")
        >>> await cache.refresh_keys()
        >>> signing_key = await cache.get_signing_key("key-id-123")
    """

    def __init__(
        self,
        jwks_url: str,
        cache_ttl: int = 3600,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize JWKS cache.

        Args:
            jwks_url: URL to fetch JWKS from
            cache_ttl: Cache TTL in seconds (default: 1 hour)
            http_client: Optional pre-configured HTTP client
        """
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self._keys: dict[str, Key] = {}
        self._last_refresh: datetime | None = None
        self._refresh_lock = asyncio.Lock()
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, read=30.0, connect=10.0, write=10.0)
        )

    async def get_signing_key(self, kid: str) -> Key:
        """
        Get signing key by key ID (kid).

        Automatically refreshes JWKS if:
        1. Cache has expired (TTL exceeded)
        2. Key ID not found in cache (new key rotation)

        Args:
            kid: Key ID from JWT header

        Returns:
            Public key for signature verification

        Raises:
            UntrustedIssuerError: If key ID is not published by the issuer
            httpx.HTTPError: If JWKS fetch fails
            ValueError: If the JWKS body is not a JSON key set
            JWKError: If a published key cannot be constructed
        """
        if self._needs_refresh():
            await self._refresh_if_stale()

        key = self._keys.get(kid)

        # Unknown kid: refresh once in case the issuer rotated its keys
        if key is None:
            logger.warning(
                f"Key ID '{kid}' not found in cache, refreshing JWKS",
                extra={"kid": kid, "cached_kids": list(self._keys.keys())},
            )
            await self.refresh_keys()
            key = self._keys.get(kid)

        if key is None:
            raise UntrustedIssuerError(
                f"Key ID '{kid}' not found in JWKS. Available keys: {list(self._keys.keys())}"
            )

        return key

    async def _refresh_if_stale(self) -> None:
        async with self._refresh_lock:
            # Another task may have refreshed while we waited
            if self._needs_refresh():
                await self._fetch_and_store()

    async def refresh_keys(self) -> None:
        """
        Fetch JWKS from the issuer and update cache.

        Raises:
            httpx.HTTPError: If HTTP request fails
            ValueError: If JWKS response is invalid
        """
        async with self._refresh_lock:
            await self._fetch_and_store()

    async def _fetch_and_store(self) -> None:
        try:
            logger.info(f"Fetching JWKS from {self.jwks_url}")
            response = await self._http_client.get(self.jwks_url)
            response.raise_for_status()

            payload = response.json()
            if not isinstance(payload, dict) or not isinstance(payload.get("keys", []), list):
                raise ValueError("JWKS response is not a key set object")
            keys_list = payload.get("keys", [])

            if not keys_list:
                logger.warning(
                    "JWKS response contains no keys. Token verification will fail "
                    "until keys are available.",
                    extra={"jwks_url": self.jwks_url},
                )
                self._keys = {}
                self._last_refresh = datetime.now(timezone.utc)
                return

            new_keys: dict[str, Key] = {}
            for key_data in keys_list:
                kid = key_data.get("kid") if isinstance(key_data, dict) else None
                if not isinstance(kid, str) or not kid:
                    logger.warning("JWKS key missing 'kid', skipping")
                    continue

                kty = key_data.get("kty")
                if kty == "EC":
                    algorithm = "ES256"
                elif kty == "RSA":
                    algorithm = "RS256"
                else:
                    algorithm = key_data.get("alg", "RS256")

                new_keys[kid] = jwk.construct(key_data, algorithm=algorithm)

                logger.debug(
                    f"Loaded key {kid} (type: {kty}, algorithm: {algorithm})",
                    extra={"kid": kid, "kty": kty, "alg": algorithm},
                )

            self._keys = new_keys
            self._last_refresh = datetime.now(timezone.utc)

            logger.info(
                "JWKS cache refreshed successfully",
                extra={
                    "key_count": len(new_keys),
                    "key_ids": list(new_keys.keys()),
                    "ttl_seconds": self.cache_ttl,
                },
            )

        except httpx.HTTPError as e:
            logger.error(
                f"Failed to fetch JWKS from {self.jwks_url}: {e}",
                exc_info=True,
                extra={"error_type": "jwks_fetch_failed"},
            )
            raise

        except Exception as e:
            logger.error(
                f"Failed to parse JWKS: {e}",
                exc_info=True,
                extra={"error_type": "jwks_parse_failed"},
            )
            raise

    def _needs_refresh(self) -> bool:
        """Check if cache is stale or never initialized."""
        if self._last_refresh is None:
            return True

        age = (datetime.now(timezone.utc) - self._last_refresh).total_seconds()
        return age >= self.cache_ttl

    async def close(self) -> None:
        """Close HTTP client. Called during application shutdown."""
        await self._http_client.aclose()
        logger.info("JWKS cache closed")
