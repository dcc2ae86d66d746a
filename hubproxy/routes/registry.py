"""Docker Registry v2 pull API proxy.

This module exposes the pull subset of the Docker Registry HTTP API V2,
proxying manifest and blob requests to Docker Hub.

See: https://docs.docker.com/registry/spec/api/
"""

import structlog
from fastapi import APIRouter, HTTPException, Request

from hubproxy.deps.registry import RegistryClientDep
from hubproxy.packages.registry_proxy import (
    cors_preflight_response,
    inbound_request_from,
    version_probe_response,
)

logger = structlog.stdlib.get_logger(__name__)

router = APIRouter(tags=["Registry"])

PROXIED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/v2/", methods=["GET", "HEAD"])
async def registry_version_check():
    """Docker Registry API version check.

    Docker CLI calls this to verify the registry speaks the v2 API. It is
    answered locally; Docker Hub is not contacted.
    """
    logger.debug("Docker registry version check")
    return version_probe_response()


@router.api_route("/v2/{path:path}", methods=PROXIED_METHODS)
async def proxy_registry_request(
    request: Request,
    path: str,
    registry_client: RegistryClientDep,
):
    """Proxy a manifest or blob request to Docker Hub.

    Paths other than /v2/<repository>/manifests/... and
    /v2/<repository>/blobs/... are rejected with 400.
    """
    return await registry_client.proxy(inbound_request_from(request))


@router.api_route(
    "/{path:path}",
    methods=["OPTIONS", *PROXIED_METHODS],
    include_in_schema=False,
)
async def fallback(request: Request, path: str):
    """Answer CORS preflight requests for any path, 404 for everything else.

    Must be registered after every other route.
    """
    if request.method == "OPTIONS":
        return cors_preflight_response()

    raise HTTPException(status_code=404, detail="Not Found")
