"""HTTP glue between FastAPI and the forwarding engine.

This module converts inbound FastAPI requests into framework-neutral
InboundRequest values and shapes upstream responses for the client.
No dependencies on hubproxy.* modules to maintain independence and reusability.
"""

from typing import AsyncIterator

import httpx
import structlog
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from .errors import ProtocolMismatch, RegistryProxyError
from .types import InboundRequest

logger = structlog.stdlib.get_logger(__name__)

API_VERSION_HEADER = "Docker-Distribution-Api-Version"
API_VERSION = "registry/2.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, POST, PUT, DELETE",
    "Access-Control-Allow-Headers": "Authorization, Content-Type, Range",
    "Access-Control-Max-Age": "86400",
}

BODY_METHODS = ("POST", "PUT", "PATCH")

# Response headers that should not be forwarded
EXCLUDED_RESPONSE_HEADERS = ("connection", "keep-alive", "transfer-encoding")


async def stream_request_body(request: Request) -> AsyncIterator[bytes]:
    """Stream request body from client in chunks.

    Args:
        request: FastAPI request object

    Yields:
        Chunks of request body data
    """
    async for chunk in request.stream():
        yield chunk


def inbound_request_from(request: Request) -> InboundRequest:
    """Wrap a FastAPI request without reading its body."""
    body = None
    if request.method in BODY_METHODS:
        body = stream_request_body(request)

    return InboundRequest(
        method=request.method,
        path=request.url.path,
        headers=request.headers,
        query_string=request.url.query,
        body=body,
    )


async def build_proxy_response(response: httpx.Response) -> Response:
    """Shape an open upstream response for the client.

    Successful responses are streamed through with the registry API version
    header added. Anything else is replaced by a short error body carrying the
    upstream status code.

    Args:
        response: Open, unread upstream response

    Returns:
        Response to send to the client. The upstream response is closed once
        the body has been relayed.
    """
    if not response.is_success:
        logger.warning(
            "Registry returned an error",
            status_code=response.status_code,
            target_host=response.url.host,
            path=response.url.path,
        )
        await response.aclose()
        return PlainTextResponse(
            f"Registry error: {response.reason_phrase}",
            status_code=response.status_code,
        )

    proxy_response = StreamingResponse(
        content=response.aiter_raw(),
        status_code=response.status_code,
        background=BackgroundTask(response.aclose),
    )

    # Repeated headers (Link, Set-Cookie) are kept as separate lines
    for name, value in response.headers.multi_items():
        if name.lower() not in EXCLUDED_RESPONSE_HEADERS:
            proxy_response.headers.append(name, value)
    proxy_response.headers[API_VERSION_HEADER] = API_VERSION

    return proxy_response


def version_probe_response() -> Response:
    return Response(status_code=200, headers={API_VERSION_HEADER: API_VERSION})


def cors_preflight_response() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


def error_response(exc: Exception) -> Response:
    """Plain-text response for a failure that stopped the request."""
    if isinstance(exc, ProtocolMismatch):
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    status_code = exc.status_code if isinstance(exc, RegistryProxyError) else 500
    return PlainTextResponse(f"Error: {exc}", status_code=status_code)
