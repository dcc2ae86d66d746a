import httpx
import pytest

from hubproxy.packages.registry_proxy import (
    DockerHubRegistryClient,
    InboundRequest,
    ProtocolMismatch,
    RegistryConfig,
)
from hubproxy.packages.registry_proxy.routing import MANIFEST_ACCEPT
from hubproxy.tests.fixtures_upstream import AUTH_HOST, REGISTRY_HOST, FakeUpstream


async def _consume(response) -> bytes:
    return b"".join([chunk async for chunk in response.body_iterator])


class TestDockerHubRegistryClient:
    async def test_version_probe_is_answered_locally(
        self,
        registry_client: DockerHubRegistryClient,
        upstream: FakeUpstream,
    ):
        response = await registry_client.proxy(InboundRequest(method="GET", path="/v2/"))

        assert response.status_code == 200
        assert response.headers["Docker-Distribution-Api-Version"] == "registry/2.0"
        assert upstream.requests == []

    async def test_invalid_path_raises_before_any_network_call(
        self,
        registry_client: DockerHubRegistryClient,
        upstream: FakeUpstream,
    ):
        with pytest.raises(ProtocolMismatch):
            await registry_client.proxy(
                InboundRequest(method="GET", path="/v2/library/nginx/tags/list")
            )

        assert upstream.requests == []

    async def test_manifest_request_overrides_accept(
        self,
        registry_client: DockerHubRegistryClient,
        upstream: FakeUpstream,
    ):
        upstream.queue_token("abc")
        upstream.queue(REGISTRY_HOST, httpx.Response(200, content=b"{}"))

        response = await registry_client.proxy(
            InboundRequest(
                method="GET",
                path="/v2/library/nginx/manifests/latest",
                headers={"accept": "application/vnd.docker.distribution.manifest.v1+json"},
            )
        )

        assert await _consume(response) == b"{}"

        [registry_request] = upstream.calls(REGISTRY_HOST)
        assert registry_request.headers["Accept"] == MANIFEST_ACCEPT
        assert str(registry_request.url) == (
            "https://registry-1.docker.io/v2/library/nginx/manifests/latest"
        )

    async def test_scope_is_derived_from_repository(
        self,
        registry_client: DockerHubRegistryClient,
        upstream: FakeUpstream,
    ):
        upstream.queue_token("abc")
        upstream.queue(REGISTRY_HOST, httpx.Response(200))

        response = await registry_client.proxy(
            InboundRequest(method="HEAD", path="/v2/bitnami/redis/blobs/sha256:abc")
        )
        await _consume(response)

        [auth_request] = upstream.calls(AUTH_HOST)
        assert auth_request.url.params["scope"] == "repository:bitnami/redis:pull"

    async def test_registry_url_trailing_slash(
        self,
        forwarding_engine,
        upstream: FakeUpstream,
    ):
        client = DockerHubRegistryClient(
            config=RegistryConfig(registry_url="https://registry-1.docker.io/"),
            engine=forwarding_engine,
        )
        upstream.queue_token("abc")
        upstream.queue(REGISTRY_HOST, httpx.Response(200))

        response = await client.proxy(
            InboundRequest(method="GET", path="/v2/library/nginx/manifests/latest")
        )
        await _consume(response)

        [registry_request] = upstream.calls(REGISTRY_HOST)
        assert registry_request.url.path == "/v2/library/nginx/manifests/latest"
