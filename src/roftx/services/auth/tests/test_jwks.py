"""Tests for JWKS cache module."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from jose import jwk

from src.roftx.services.auth.exceptions import UntrustedIssuerError
from src.roftx.services.auth.jwks import JWKSCache

JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"


@pytest.fixture
def jwks_response(rsa_keys):
    """Provide a Google-style JWKS document with two keys."""
    public_jwk = jwk.construct(rsa_keys[1], algorithm="RS256").to_dict()
    return {
        "keys": [
            {**public_jwk, "kid": "key-1", "use": "sig", "alg": "RS256"},
            {**public_jwk, "kid": "key-2", "use": "sig", "alg": "RS256"},
        ]
    }


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


@pytest.mark.asyncio
class TestJWKSCache:
    """Tests for JWKSCache class."""

    async def test_initialization(self):
        cache = JWKSCache(JWKS_URL, cache_ttl=3600)

        assert cache.jwks_url == JWKS_URL
        assert cache.cache_ttl == 3600
        assert cache._keys == {}
        assert cache._last_refresh is None

    async def test_refresh_keys_success(self, jwks_response):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))

        await cache.refresh_keys()

        assert set(cache._keys) == {"key-1", "key-2"}
        assert cache._last_refresh is not None

    async def test_refresh_keys_http_error(self):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(side_effect=httpx.HTTPError("Connection failed"))

        with pytest.raises(httpx.HTTPError):
            await cache.refresh_keys()

    async def test_refresh_keys_empty_response(self):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response({"keys": []}))

        await cache.refresh_keys()

        assert cache._keys == {}
        assert cache._last_refresh is not None

    @pytest.mark.parametrize("payload", [["key"], {"keys": "key-1"}])
    async def test_refresh_keys_rejects_non_key_set(self, payload):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(payload))

        with pytest.raises(ValueError, match="not a key set"):
            await cache.refresh_keys()

        assert cache._last_refresh is None

    async def test_key_without_kid_skipped(self, jwks_response):
        del jwks_response["keys"][0]["kid"]
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))

        await cache.refresh_keys()

        assert list(cache._keys) == ["key-2"]

    async def test_get_signing_key_fetches_on_first_use(self, jwks_response):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))

        key = await cache.get_signing_key("key-1")

        assert key is cache._keys["key-1"]
        cache._http_client.get.assert_awaited_once_with(JWKS_URL)

    async def test_get_signing_key_uses_cache(self, jwks_response):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))

        await cache.get_signing_key("key-1")
        await cache.get_signing_key("key-2")

        assert cache._http_client.get.await_count == 1

    async def test_unknown_kid_refreshes_once_then_fails(self, jwks_response):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))
        await cache.refresh_keys()

        with pytest.raises(UntrustedIssuerError, match="key-9"):
            await cache.get_signing_key("key-9")

        assert cache._http_client.get.await_count == 2

    async def test_unknown_kid_found_after_rotation(self, jwks_response):
        rotated = {"keys": [{**jwks_response["keys"][0], "kid": "key-3"}]}
        cache = JWKSCache(JWKS_URL)
        cache._http_client.get = AsyncMock(
            side_effect=[_response(jwks_response), _response(rotated)]
        )
        await cache.refresh_keys()

        key = await cache.get_signing_key("key-3")

        assert key is cache._keys["key-3"]
        assert "key-1" not in cache._keys

    async def test_expired_cache_refreshes(self, jwks_response):
        cache = JWKSCache(JWKS_URL, cache_ttl=60)
        cache._http_client.get = AsyncMock(return_value=_response(jwks_response))
        await cache.refresh_keys()
        cache._last_refresh = datetime.now(timezone.utc) - timedelta(seconds=61)

        await cache.get_signing_key("key-1")

        assert cache._http_client.get.await_count == 2

    async def test_concurrent_first_use_fetches_once(self, jwks_response):
        cache = JWKSCache(JWKS_URL)

        async def slow_get(url):
            await asyncio.sleep(0.01)
            return _response(jwks_response)

        cache._http_client.get = AsyncMock(side_effect=slow_get)

        await asyncio.gather(*(cache.get_signing_key("key-1") for _ in range(5)))

        assert cache._http_client.get.await_count == 1

    async def test_close(self):
        cache = JWKSCache(JWKS_URL)
        cache._http_client.aclose = AsyncMock()

        await cache.close()

        cache._http_client.aclose.assert_awaited_once()
