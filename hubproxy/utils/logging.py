import logging
import time
from enum import Enum

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI, Request, Response
from pydantic_settings import BaseSettings
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from structlog.typing import EventDict, Processor, WrappedLogger

REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset(["authorization", "token", "password"])


class LogFormats(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class LogSettings(BaseSettings):
    log_format: LogFormats = LogFormats.JSON
    log_level: str = "INFO"


def redact_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask bearer tokens and other credentials passed as log context."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def _shared_processors(log_format: LogFormats) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_credentials,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if log_format == LogFormats.JSON:
        processors.append(structlog.processors.format_exc_info)

    return processors


def configure_logging(settings: LogSettings | None = None):
    """Route structlog and stdlib records (uvicorn, httpx) through one renderer."""
    settings = settings or LogSettings()

    renderer: Processor = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == LogFormats.CONSOLE
        else structlog.processors.JSONRenderer()
    )
    processors = _shared_processors(settings.log_format)

    structlog.configure(
        processors=[
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True

    # Replaced by the access line below
    logging.getLogger("uvicorn.access").handlers.clear()
    logging.getLogger("uvicorn.access").propagate = False

    # httpx logs every token endpoint URL at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logger(app: FastAPI):
    configure_logging()

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(CorrelationIdMiddleware)


access_logger = structlog.stdlib.get_logger("hubproxy.access")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind the request id for every log line and emit one access line per request.

    For streamed blobs the line is written once headers are sent, so
    ``duration_ms`` covers time to first byte rather than the full transfer.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        structlog.contextvars.clear_contextvars()
        request_id = correlation_id.get()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception:
            structlog.stdlib.get_logger("hubproxy.error").exception(
                "Uncaught exception", path=request.url.path
            )
            raise
        finally:
            access_logger.info(
                f"{request.method} {request.url.path} {status_code}",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                client=request.client.host if request.client else None,
                user_agent=request.headers.get("user-agent"),
            )
