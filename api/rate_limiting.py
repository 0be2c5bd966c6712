"""Rate limiting dependencies using Redis fixed windows."""

import hashlib

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status

from api.config import Settings, get_settings
from api.dependencies import get_redis


async def _hit(redis: aioredis.Redis, key: str, limit: int, window: int, label: str) -> None:
    """Count one request against *key*; raise 429 once *limit* is exceeded."""
    current = await redis.incr(key)

    # Set expiration on first request
    if current == 1:
        await redis.expire(key, window)

    if current > limit:
        ttl = await redis.ttl(key)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {limit} requests per {label}.",
            headers={"Retry-After": str(ttl if ttl > 0 else window)},
        )


async def rate_limit_by_ip(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> None:
    """Rate limit by client IP address (per minute)."""
    if not settings.rate_limit_enabled:
        return

    client_ip = request.client.host if request.client else "unknown"
    await _hit(
        redis,
        f"rate_limit:ip:{client_ip}",
        settings.rate_limit_per_minute,
        60,
        "minute",
    )


async def rate_limit_by_api_key(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> None:
    """Rate limit by API key (per hour, more generous than IP)."""
    if not settings.rate_limit_enabled:
        return

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        # No API key, skip (IP rate limit will catch it)
        return

    # Hash API key for privacy
    key_hash = hashlib.sha256(auth_header[7:].encode()).hexdigest()[:16]
    await _hit(
        redis,
        f"rate_limit:api_key:{key_hash}",
        settings.rate_limit_per_hour,
        3600,
        "hour",
    )


async def rate_limit_combined(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> None:
    """Strict IP limit plus the per-key limit for authenticated calls."""
    await rate_limit_by_ip(request, redis, settings)

    if "Authorization" in request.headers:
        await rate_limit_by_api_key(request, redis, settings)
