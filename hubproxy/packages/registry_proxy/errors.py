"""Exceptions raised while proxying registry requests."""

from typing import Optional


class RegistryProxyError(Exception):
    """Base class for registry proxy failures.

    ``status_code`` is the HTTP status the failure is reported to the
    container client with.
    """

    status_code: int = 500


class AuthError(RegistryProxyError):
    """The token endpoint was unreachable, refused, or returned no token."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamError(RegistryProxyError):
    """A network or protocol failure while talking to the registry."""


class RedirectError(UpstreamError):
    """The registry answered with a redirect but no Location header."""


class ProtocolMismatch(RegistryProxyError):
    """The inbound path is not a registry manifest or blob path."""

    status_code = 400
