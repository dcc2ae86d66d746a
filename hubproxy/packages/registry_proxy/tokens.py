"""Bearer token acquisition for registry pull scopes."""

import httpx
import structlog

from .cache import TokenCache
from .errors import AuthError
from .types import RegistryConfig

logger = structlog.stdlib.get_logger(__name__)


class TokenManager:
    """Obtains and caches scoped bearer tokens from the registry token service.

    Tokens are cached under their scope string for a fixed TTL. The manager
    never retries on its own: callers ask for a forced refresh when the
    registry rejects a cached token.
    """

    def __init__(
        self,
        config: RegistryConfig,
        client: httpx.AsyncClient,
        cache: TokenCache,
    ):
        """Initialize the token manager.

        Args:
            config: Registry configuration (token endpoint, service, TTL)
            client: Shared HTTP client used to reach the token endpoint
            cache: Store holding scope -> token entries
        """
        self.config = config
        self.client = client
        self.cache = cache

    async def acquire(self, scope: str, force_refresh: bool = False) -> str:
        """Get a bearer token for ``scope``.

        Args:
            scope: Authorization scope (e.g., "repository:library/nginx:pull")
            force_refresh: Skip the cache and always ask the token endpoint

        Returns:
            Bearer token string

        Raises:
            AuthError: If the token endpoint fails or returns no token
        """
        if not force_refresh:
            cached_token = await self.cache.get(scope)
            if cached_token:
                logger.debug("Using cached registry token", scope=scope)
                return cached_token

        token = await self._fetch_token(scope)
        await self.cache.put(scope, token, ttl=self.config.token_ttl_seconds)

        logger.info(
            "Retrieved registry token",
            scope=scope,
            forced=force_refresh,
            ttl=self.config.token_ttl_seconds,
        )
        return token

    async def _fetch_token(self, scope: str) -> str:
        params = {
            "service": self.config.auth_service,
            "scope": scope,
        }

        try:
            response = await self.client.get(
                self.config.auth_url,
                params=params,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(
                "Token endpoint unreachable",
                scope=scope,
                auth_url=self.config.auth_url,
                error=str(e),
            )
            raise AuthError(f"Failed to get auth token: {e}") from e

        if not response.is_success:
            logger.error(
                "Token endpoint returned an error",
                scope=scope,
                status_code=response.status_code,
            )
            raise AuthError(
                f"Failed to get auth token: {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthError("Failed to get auth token: malformed response") from e

        token = payload.get("token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("Failed to get auth token: no token in response")

        return token
