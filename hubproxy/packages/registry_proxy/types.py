"""Registry proxy types and data structures.

This module contains shared types used across the registry proxy package.
No dependencies on hubproxy.* modules to maintain independence.
"""

from dataclasses import dataclass, field
from typing import AsyncIterable, Mapping, Optional


@dataclass
class RegistryConfig:
    """Configuration for the upstream registry and its token service.

    Attributes:
        registry_url: Base URL of the registry (e.g., "https://registry-1.docker.io")
        auth_url: Token endpoint (e.g., "https://auth.docker.io/token")
        auth_service: Value of the ``service`` query parameter sent to the
                      token endpoint (e.g., "registry.docker.io")
        token_ttl_seconds: Lifetime assumed for every issued token. The token
                           endpoint does not always return ``expires_in``.
    """

    registry_url: str = "https://registry-1.docker.io"
    auth_url: str = "https://auth.docker.io/token"
    auth_service: str = "registry.docker.io"
    token_ttl_seconds: int = 300


@dataclass
class InboundRequest:
    """A request received from a container client, independent of the web framework."""

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: Optional[AsyncIterable[bytes]] = None


@dataclass
class ForwardRequest:
    """What to send upstream, minus the credentials.

    The forwarding engine builds a fresh ``httpx.Request`` from this for every
    attempt, so the Authorization header is never carried over between them.
    """

    method: str
    headers: dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: Optional[AsyncIterable[bytes]] = None
