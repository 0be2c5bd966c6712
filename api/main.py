"""Main FastAPI application instance."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from api.config import get_settings
from api.routers import ai, health, scripts
from core.exceptions import (
    AuthenticationException,
    BridgeAppException,
    ConflictException,
    LLMException,
    NotFoundException,
    RateLimitException,
    SynthesisException,
    ValidationException,
)
from core.models import ErrorDetail, ErrorResponse
from db.session import init_models

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific class first
_STATUS_BY_EXCEPTION: list[tuple[type[BridgeAppException], int]] = [
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (ConflictException, status.HTTP_409_CONFLICT),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (AuthenticationException, status.HTTP_401_UNAUTHORIZED),
    (RateLimitException, status.HTTP_429_TOO_MANY_REQUESTS),
    (SynthesisException, status.HTTP_502_BAD_GATEWAY),
    (LLMException, status.HTTP_502_BAD_GATEWAY),
]


def status_for_exception(exc: BridgeAppException) -> int:
    for exc_type, code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info(f"Starting Bridge API v0.1.0 in {settings.env} environment")

    if settings.is_sqlite:
        await init_models()

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Bridge API",
    description="Screenwriting backend: scripts, ordered scenes and AI bridge scenes",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,  # Hide in production
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    max_age=600,
)


@app.exception_handler(BridgeAppException)
async def bridge_exception_handler(request: Request, exc: BridgeAppException) -> JSONResponse:
    """Handle application exceptions."""
    code = status_for_exception(exc)
    if code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}")

    return JSONResponse(
        status_code=code,
        content=ErrorResponse(
            error=exc.__class__.__name__,
            message=exc.message,
            details=[ErrorDetail(field=k, message=str(v)) for k, v in exc.details.items()],
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    details = [
        ErrorDetail(
            field=".".join(str(loc) for loc in err["loc"]),
            message=err["msg"],
            error_code=err["type"],
        )
        for err in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            message="Request validation failed",
            details=details,
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


app.include_router(health.router, tags=["Health"])
app.include_router(scripts.router, prefix="/v1/scripts", tags=["Scripts"])
app.include_router(ai.router, prefix="/v1/ai", tags=["AI"])

if settings.metrics_enabled:
    app.mount("/metrics", make_asgi_app())


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Bridge API v0.1.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }
