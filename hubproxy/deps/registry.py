from typing import Annotated

from fastapi import Depends

from hubproxy.factories import registry_client_factory
from hubproxy.packages.registry_proxy import RegistryClient


def get_registry_client() -> RegistryClient:
    return registry_client_factory()


RegistryClientDep = Annotated[RegistryClient, Depends(get_registry_client)]
