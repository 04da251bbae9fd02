import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from timeline_engine.api import commands, composition
from timeline_engine.config import get_settings
from timeline_engine.exceptions import TimelineError
from timeline_engine.middleware.request_context import (
    create_request_context,
    envelope_error,
    envelope_error_from_exception,
)
from timeline_engine.services.command_service import CommandService

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    app.state.command_service = CommandService(settings=settings)
    logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")
    yield
    # Shutdown
    logger.info("Shutting down")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)


def _http_error_code(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_ERROR",
    }
    return mapping.get(status_code, "HTTP_ERROR")


@app.exception_handler(TimelineError)
async def timeline_exception_handler(request: Request, exc: TimelineError) -> JSONResponse:
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return envelope_error_from_exception(create_request_context(), exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request validation errors (422) in envelope format."""
    errors = exc.errors()
    if errors:
        first_error = errors[0]
        loc = " -> ".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        message = f"{loc}: {msg}" if loc else msg
    else:
        message = "Request validation failed"

    return envelope_error(
        create_request_context(),
        code="VALIDATION_ERROR",
        message=message,
        status_code=422,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return envelope_error(
        create_request_context(),
        code=_http_error_code(exc.status_code),
        message=str(exc.detail),
        status_code=exc.status_code,
    )


# Global exception handler to ensure errors return proper JSON
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception: {exc}")
    return envelope_error(
        create_request_context(),
        code="INTERNAL_ERROR",
        message="Internal server error",
        status_code=500,
    )


# Routers
app.include_router(commands.router, prefix="/api/commands", tags=["commands"])
app.include_router(composition.router, prefix="/api", tags=["composition"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "version": settings.app_version}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
