"""Health check endpoints."""

from datetime import datetime

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, get_llm, get_redis, verify_api_key
from core.db_models import ApiKeyModel
from core.models import HealthResponse, ReadinessResponse
from llm.base import BaseLLMProvider

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="Simple health check that returns 200 if the service is running.",
)
async def health_check() -> HealthResponse:
    """Liveness check; does not check external dependencies."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version="0.1.0",
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Checks the database, Redis and the LLM provider.",
)
async def readiness_check(
    http_response: Response,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    llm: BaseLLMProvider = Depends(get_llm),
    _api_key: ApiKeyModel = Depends(verify_api_key),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Returns 200 if all services are available, 503 otherwise.
    """
    services_status: dict[str, bool] = {}

    try:
        await db.execute(text("SELECT 1"))
        services_status["database"] = True
    except Exception:
        services_status["database"] = False

    try:
        await redis.ping()
        services_status["redis"] = True
    except Exception:
        services_status["redis"] = False

    services_status["llm"] = await llm.health_check()

    all_ready = all(services_status.values())

    readiness_response = ReadinessResponse(
        status="ready" if all_ready else "not_ready",
        timestamp=datetime.utcnow(),
        services=services_status,
    )

    if not all_ready:
        http_response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return readiness_response
