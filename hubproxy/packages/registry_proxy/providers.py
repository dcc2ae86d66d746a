"""Registry client providers.

This module provides the RegistryClient protocol and the Docker Hub
implementation that combines path parsing, token-authenticated forwarding
and response shaping.
"""

from typing import Protocol

import structlog
from fastapi import Response

from .forwarding import ForwardingEngine
from .proxy import build_proxy_response, version_probe_response
from .routing import build_upstream_headers, is_version_probe, parse_registry_path
from .types import ForwardRequest, InboundRequest, RegistryConfig

logger = structlog.stdlib.get_logger(__name__)


class RegistryClient(Protocol):
    """Protocol for registry client implementations.

    All registry clients must implement the proxy method to handle
    Docker Registry v2 API pull requests.
    """

    async def proxy(self, request: InboundRequest) -> Response:
        """Proxy a registry request to the upstream registry.

        Args:
            request: Inbound request from the container client

        Returns:
            Response for the container client

        Raises:
            ProtocolMismatch: If the path is not a manifest or blob path
            RegistryProxyError: If token acquisition or forwarding fails
        """
        ...


class DockerHubRegistryClient:
    """Pull-through client for Docker Hub.

    Handles bearer-token authentication and blob redirects for the public
    Docker Hub registry.
    """

    def __init__(self, config: RegistryConfig, engine: ForwardingEngine):
        self.config = config
        self.engine = engine

    def _target_url(self, path: str) -> str:
        return f"{self.config.registry_url.rstrip('/')}{path}"

    async def proxy(self, request: InboundRequest) -> Response:
        if is_version_probe(request.path):
            return version_probe_response()

        route = parse_registry_path(request.path)
        target_url = self._target_url(request.path)

        logger.info(
            "Proxying request to registry",
            method=request.method,
            repository=route.repository,
            kind=route.kind,
            target_url=target_url,
        )

        forward_request = ForwardRequest(
            method=request.method,
            headers=build_upstream_headers(route, request.headers),
            query_string=request.query_string,
            body=request.body,
        )
        response = await self.engine.forward(target_url, forward_request, route.scope)

        logger.info(
            "Registry response received",
            status_code=response.status_code,
            repository=route.repository,
        )
        return await build_proxy_response(response)
