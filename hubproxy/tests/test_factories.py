from unittest.mock import patch

import httpx
import pytest

from hubproxy import factories
from hubproxy.packages.registry_proxy import (
    DockerHubRegistryClient,
    MemoryTokenCache,
    RedisTokenCache,
)
from hubproxy.settings import settings


@pytest.fixture(autouse=True)
async def clear_factories():
    await factories.close_factories()
    yield
    await factories.close_factories()


def test_memory_token_cache_by_default():
    with patch.object(settings, "TOKEN_CACHE_TYPE", "memory"):
        assert isinstance(factories.token_cache_factory(), MemoryTokenCache)


def test_redis_token_cache():
    with (
        patch.object(settings, "TOKEN_CACHE_TYPE", "redis"),
        patch.object(settings, "TOKEN_CACHE_PREFIX", "test:"),
    ):
        cache = factories.token_cache_factory()

    assert isinstance(cache, RedisTokenCache)
    assert cache._key("scope") == "test:scope"


def test_invalid_token_cache_type():
    with patch.object(settings, "TOKEN_CACHE_TYPE", "memcached"):
        with pytest.raises(ValueError, match="Invalid token cache type"):
            factories.token_cache_factory()


def test_http_client_does_not_follow_redirects():
    client = factories.http_client_factory()

    assert isinstance(client, httpx.AsyncClient)
    assert client.follow_redirects is False
    assert client.timeout.read == settings.UPSTREAM_READ_TIMEOUT


def test_registry_client_uses_configured_registry():
    with (
        patch.object(settings, "TOKEN_CACHE_TYPE", "memory"),
        patch.object(settings, "REGISTRY_URL", "https://mirror.example"),
        patch.object(settings, "TOKEN_TTL_SECONDS", 120),
    ):
        factories.registry_config_factory.cache_clear()
        client = factories.registry_client_factory()

    assert isinstance(client, DockerHubRegistryClient)
    assert client.config.registry_url == "https://mirror.example"
    assert client.engine.token_manager.config.token_ttl_seconds == 120
    factories.registry_config_factory.cache_clear()


async def test_close_factories_closes_http_client():
    client = factories.http_client_factory()

    await factories.close_factories()

    assert client.is_closed
    assert factories.http_client_factory() is not client


def test_http_client_refuses_cookies():
    client = factories.http_client_factory()
    response = httpx.Response(
        200,
        headers={"Set-Cookie": "sess=alice; Path=/"},
        request=httpx.Request("GET", "https://registry-1.docker.io/v2/"),
    )

    client.cookies.extract_cookies(response)

    assert len(client.cookies) == 0
