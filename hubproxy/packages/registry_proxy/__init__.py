"""Registry proxy package for the Docker Registry v2 pull API.

This package provides token management, authenticated forwarding and
response shaping for proxying pull requests to a public registry.
"""

from .cache import MemoryTokenCache, RedisTokenCache, TokenCache
from .errors import (
    AuthError,
    ProtocolMismatch,
    RedirectError,
    RegistryProxyError,
    UpstreamError,
)
from .forwarding import ForwardingEngine
from .providers import DockerHubRegistryClient, RegistryClient
from .proxy import (
    cors_preflight_response,
    error_response,
    inbound_request_from,
    version_probe_response,
)
from .tokens import TokenManager
from .types import ForwardRequest, InboundRequest, RegistryConfig

__all__ = [
    # Protocols
    "RegistryClient",
    "TokenCache",
    # Providers
    "DockerHubRegistryClient",
    # Core
    "ForwardingEngine",
    "TokenManager",
    "MemoryTokenCache",
    "RedisTokenCache",
    # Types
    "ForwardRequest",
    "InboundRequest",
    "RegistryConfig",
    # Errors
    "AuthError",
    "ProtocolMismatch",
    "RedirectError",
    "RegistryProxyError",
    "UpstreamError",
    # Utilities
    "cors_preflight_response",
    "error_response",
    "inbound_request_from",
    "version_probe_response",
]
