"""Authenticated request forwarding to the upstream registry.

The engine attaches a scoped bearer token, retries once when the registry
rejects it, and follows a single redirect hop to the storage backend for
blob downloads. Responses are returned unread so the body can be streamed
back to the client.
"""

import httpx
import structlog

from .errors import RedirectError, UpstreamError
from .tokens import TokenManager
from .types import ForwardRequest

logger = structlog.stdlib.get_logger(__name__)

REDIRECT_STATUSES = (302, 307)

# Inbound headers carried to the storage backend on a redirect hop
REDIRECT_FORWARDED_HEADERS = ("range", "accept-encoding")


class ForwardingEngine:
    """Sends registry requests upstream on behalf of the container client."""

    def __init__(self, client: httpx.AsyncClient, token_manager: TokenManager):
        """Initialize the forwarding engine.

        Args:
            client: Shared HTTP client. Must not follow redirects itself.
            token_manager: Source of bearer tokens for each scope
        """
        self.client = client
        self.token_manager = token_manager

    async def forward(
        self,
        url: str,
        request: ForwardRequest,
        scope: str,
    ) -> httpx.Response:
        """Forward a request to the registry.

        Args:
            url: Full upstream URL without query string
            request: Method, headers, query string and body to send
            scope: Token scope (e.g., "repository:library/nginx:pull")

        Returns:
            Open, unread upstream response. The caller must close it.

        Raises:
            AuthError: If a token cannot be obtained
            RedirectError: If a redirect has no Location header
            UpstreamError: On any network failure reaching the registry
        """
        token = await self.token_manager.acquire(scope)
        response = await self._send(self._build_request(url, request, token))

        if response.status_code == 401:
            if request.body is not None:
                # A streamed body is already consumed, it cannot be resent
                logger.warning(
                    "Registry rejected token for request with body, not retrying",
                    scope=scope,
                    method=request.method,
                )
                return response

            await response.aclose()
            logger.info("Registry rejected token, refreshing", scope=scope)

            token = await self.token_manager.acquire(scope, force_refresh=True)
            response = await self._send(self._build_request(url, request, token))

        if response.status_code in REDIRECT_STATUSES:
            location = response.headers.get("location")
            redirect_url = str(response.url.join(location)) if location else None
            await response.aclose()

            if not redirect_url:
                raise RedirectError("Redirect location not found")

            logger.info(
                "Following registry redirect",
                scope=scope,
                status_code=response.status_code,
            )
            response = await self._send(
                self._build_redirect_request(redirect_url, request)
            )

        return response

    def _build_request(
        self,
        url: str,
        request: ForwardRequest,
        token: str,
    ) -> httpx.Request:
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() != "authorization"
        }
        headers["Authorization"] = f"Bearer {token}"

        if request.query_string:
            url = f"{url}?{request.query_string}"

        return self.client.build_request(
            method=request.method,
            url=url,
            headers=headers,
            content=request.body,
        )

    def _build_redirect_request(
        self,
        url: str,
        request: ForwardRequest,
    ) -> httpx.Request:
        # Pre-signed storage URLs, no registry credentials
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() in REDIRECT_FORWARDED_HEADERS
        }
        method = "HEAD" if request.method.upper() == "HEAD" else "GET"

        return self.client.build_request(method=method, url=url, headers=headers)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self.client.send(request, stream=True)
        except httpx.TimeoutException as e:
            logger.error(
                "Timeout while forwarding request",
                error=str(e),
                method=request.method,
                target_host=request.url.host,
            )
            raise UpstreamError(f"Upstream request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(
                "HTTP error while forwarding request",
                error=str(e),
                method=request.method,
                target_host=request.url.host,
            )
            raise UpstreamError(f"Upstream request failed: {e}") from e
