from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hubproxy.factories import close_factories
from hubproxy.packages.registry_proxy import RegistryProxyError, error_response
from hubproxy.routes import health, registry
from hubproxy.utils.logging import setup_logger
from hubproxy.utils.sentry import init_sentry


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield

    await close_factories()


init_sentry()
app = FastAPI(lifespan=lifespan)
setup_logger(app)


@app.exception_handler(RegistryProxyError)
async def registry_proxy_exception_handler(request: Request, exc: RegistryProxyError):
    return error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    return error_response(exc)


app.include_router(health.router)
app.include_router(registry.router)
