from functools import lru_cache
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx
import structlog
from redis.asyncio import from_url as redis_from_url

from hubproxy.packages.registry_proxy import (
    DockerHubRegistryClient,
    ForwardingEngine,
    MemoryTokenCache,
    RedisTokenCache,
    RegistryClient,
    RegistryConfig,
    TokenCache,
    TokenManager,
)
from hubproxy.settings import settings

logger = structlog.stdlib.get_logger(__name__)


@lru_cache
def registry_config_factory() -> RegistryConfig:
    return RegistryConfig(
        registry_url=settings.REGISTRY_URL,
        auth_url=settings.AUTH_URL,
        auth_service=settings.AUTH_SERVICE,
        token_ttl_seconds=settings.TOKEN_TTL_SECONDS,
    )


def cookieless_jar() -> CookieJar:
    """Cookie jar that refuses every cookie, so no state leaks between clients."""
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


@lru_cache
def http_client_factory() -> httpx.AsyncClient:
    """Shared HTTP client for the token endpoint, registry and storage backend.

    Redirects are never followed automatically; the forwarding engine
    resolves the single blob redirect hop itself.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.UPSTREAM_CONNECT_TIMEOUT,
            read=settings.UPSTREAM_READ_TIMEOUT,
            write=settings.UPSTREAM_WRITE_TIMEOUT,
            pool=settings.UPSTREAM_POOL_TIMEOUT,
        ),
        follow_redirects=False,
        cookies=cookieless_jar(),
        headers={"User-Agent": settings.USER_AGENT},
    )


@lru_cache
def token_cache_factory() -> TokenCache:
    """Factory function for creating the token cache.

    Returns:
        TokenCache for the configured cache type

    Raises:
        ValueError: If the cache type is invalid
    """
    if settings.TOKEN_CACHE_TYPE == "memory":
        return MemoryTokenCache()

    elif settings.TOKEN_CACHE_TYPE == "redis":
        redis = redis_from_url(settings.REDIS_URL, decode_responses=True)
        return RedisTokenCache(redis, prefix=settings.TOKEN_CACHE_PREFIX)

    else:
        raise ValueError(f"Invalid token cache type: {settings.TOKEN_CACHE_TYPE}")


@lru_cache
def token_manager_factory() -> TokenManager:
    return TokenManager(
        config=registry_config_factory(),
        client=http_client_factory(),
        cache=token_cache_factory(),
    )


@lru_cache
def registry_client_factory() -> RegistryClient:
    engine = ForwardingEngine(
        client=http_client_factory(),
        token_manager=token_manager_factory(),
    )
    return DockerHubRegistryClient(config=registry_config_factory(), engine=engine)


async def close_factories():
    """Release pooled connections held by factory-created clients."""
    if http_client_factory.cache_info().currsize:
        await http_client_factory().aclose()
        http_client_factory.cache_clear()

    if token_cache_factory.cache_info().currsize:
        cache = token_cache_factory()
        if isinstance(cache, RedisTokenCache):
            await cache.aclose()
        token_cache_factory.cache_clear()

    token_manager_factory.cache_clear()
    registry_client_factory.cache_clear()
    logger.debug("Closed upstream clients")
