"""Registry path parsing and upstream header preparation.

See: https://distribution.github.io/distribution/spec/api/
"""

import re
from dataclasses import dataclass
from typing import Literal, Mapping

from .errors import ProtocolMismatch

# Repository names may contain slashes (e.g., "library/nginx"), so the
# repository group is lazy and the first manifests/blobs segment wins.
REGISTRY_PATH_PATTERN = re.compile(r"^/v2/(.+?)/(manifests|blobs)/")

VERSION_PROBE_PATH = "/v2/"

MANIFEST_MEDIA_TYPES = (
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.oci.image.index.v1+json",
)
MANIFEST_ACCEPT = ", ".join(MANIFEST_MEDIA_TYPES)

# Hop-by-hop and credential headers, never forwarded upstream
EXCLUDED_REQUEST_HEADERS = frozenset(
    [
        "host",
        "authorization",
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    ]
)


@dataclass(frozen=True)
class RegistryRoute:
    """A parsed registry resource path."""

    repository: str
    kind: Literal["manifests", "blobs"]

    @property
    def scope(self) -> str:
        return f"repository:{self.repository}:pull"

    @property
    def is_manifest(self) -> bool:
        return self.kind == "manifests"


def is_version_probe(path: str) -> bool:
    return path == VERSION_PROBE_PATH


def parse_registry_path(path: str) -> RegistryRoute:
    """Split a registry path into repository and resource kind.

    Args:
        path: Request path (e.g., "/v2/library/nginx/manifests/latest")

    Returns:
        RegistryRoute for the path

    Raises:
        ProtocolMismatch: If the path is not a manifest or blob path
    """
    match = REGISTRY_PATH_PATTERN.match(path)
    if not match:
        raise ProtocolMismatch("Invalid registry request")

    return RegistryRoute(repository=match.group(1), kind=match.group(2))


def build_upstream_headers(
    route: RegistryRoute,
    headers: Mapping[str, str],
) -> dict[str, str]:
    """Copy client headers for the upstream request.

    Manifest requests always ask for the four supported manifest media types,
    whatever the client sent.
    """
    upstream_headers = {
        name.lower(): value
        for name, value in headers.items()
        if name.lower() not in EXCLUDED_REQUEST_HEADERS
    }

    if route.is_manifest:
        upstream_headers["accept"] = MANIFEST_ACCEPT

    # Body bytes are relayed as received
    upstream_headers.setdefault("accept-encoding", "identity")

    return upstream_headers
