from typing import Literal

from fastapi import APIRouter
from typing_extensions import TypedDict

from hubproxy.settings import settings

router = APIRouter(tags=["Health"])


class HealthResponse(TypedDict):
    status: Literal["pass"]
    registry: str
    token_cache: str


@router.get("/health", responses={200: {"model": HealthResponse}})
async def health() -> HealthResponse:
    return {
        "status": "pass",
        "registry": settings.REGISTRY_URL,
        "token_cache": settings.TOKEN_CACHE_TYPE,
    }
