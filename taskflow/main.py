import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from taskflow.config import get_settings
from taskflow.exceptions import (
    EnhancementFailed,
    NotFoundError,
    RateLimitExceeded,
    TaskBusyError,
    ValidationError,
)
from taskflow.mcp_server import mcp
from taskflow.models.common import ErrorResponse
from taskflow.routers.board import get_store, router as board_router
from taskflow.routers.drag import router as drag_router
from taskflow.routers.enhance import router as enhance_router
from taskflow.services.timer import TimerLoop


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan> - {message}"
        ),
    )


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return JSONResponse(
                status_code=403,
                content={"error": "Localhost access only", "error_code": "forbidden"},
            )
        return await call_next(request)


# --- FastAPI app ---

api = FastAPI(title="Taskflow", version="0.1.0")
api.include_router(enhance_router)
api.include_router(board_router)
api.include_router(drag_router)


# --- Exception handlers ---

def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=message, error_code=error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@api.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, "validation_error", str(exc))


@api.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return _error(400, "validation_error", "Malformed request body")


@api.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error(404, "not_found", str(exc))


@api.exception_handler(TaskBusyError)
async def task_busy_error_handler(request: Request, exc: TaskBusyError):
    return _error(409, "busy", str(exc))


@api.exception_handler(RateLimitExceeded)
async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded):
    # Same status as provider failures; error_code tells them apart
    return _error(500, "rate_limit", str(exc))


@api.exception_handler(EnhancementFailed)
async def enhancement_error_handler(request: Request, exc: EnhancementFailed):
    return _error(500, "enhancement_failed", str(exc))


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)


@asynccontextmanager
async def lifespan(app: Starlette):
    timer = TimerLoop(get_store(), get_settings().tick_interval)
    timer.start()
    try:
        async with mcp_app.lifespan(app):
            yield
    finally:
        timer.stop()


app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=lifespan,
)


def run():
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "taskflow.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
