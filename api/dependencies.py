"""FastAPI dependency injection functions."""

import hashlib
import secrets
from collections.abc import AsyncIterator
from datetime import datetime

import redis.asyncio as aioredis
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.config import Settings, get_settings
from core.db_models import ApiKeyModel
from db.session import get_db_session
from llm.base import BaseLLMProvider
from llm.factory import get_llm_provider
from services.bridge_synthesizer import BridgeSynthesizer, LLMBridgeSynthesizer
from services.scene_assistant import SceneAssistant
from services.script_repository import ScriptRepository


def hash_api_key(api_key: str) -> str:
    """API keys are stored as SHA-256 hex digests."""
    return hashlib.sha256(api_key.encode()).hexdigest()


def generate_api_key(prefix: str = "brg_") -> tuple[str, str]:
    """Generate a new API key and its hash."""
    api_key = f"{prefix}{secrets.token_hex(32)}"
    return api_key, hash_api_key(api_key)


async def get_settings_dependency() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Get database session."""
    async for session in get_db_session():
        yield session


async def get_redis() -> AsyncIterator[aioredis.Redis]:
    """Get Redis connection."""
    settings = get_settings()
    redis_client = aioredis.from_url(
        str(settings.redis_url),
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.redis_max_connections,
    )
    try:
        yield redis_client
    finally:
        await redis_client.aclose()


async def get_llm() -> BaseLLMProvider:
    """Get the configured LLM provider.

    A misconfigured provider (e.g. missing API key) is reported as 503 so the
    rest of the API keeps working.
    """
    try:
        return get_llm_provider(get_settings())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"LLM provider unavailable: {e}",
        )


async def get_bridge_synthesizer(
    provider: BaseLLMProvider = Depends(get_llm),
) -> BridgeSynthesizer:
    settings = get_settings()
    return LLMBridgeSynthesizer(
        provider,
        max_tokens=settings.scene_max_tokens,
        temperature=settings.generation_temperature,
    )


async def get_scene_assistant(provider: BaseLLMProvider = Depends(get_llm)) -> SceneAssistant:
    settings = get_settings()
    return SceneAssistant(
        provider,
        scene_max_tokens=settings.scene_max_tokens,
        assistant_max_tokens=settings.assistant_max_tokens,
        temperature=settings.generation_temperature,
    )


async def get_script_repository(db: AsyncSession = Depends(get_db)) -> ScriptRepository:
    return ScriptRepository(db)


async def verify_api_key(
    authorization: str | None = Header(None, description="Bearer API key"),
    db: AsyncSession = Depends(get_db),
) -> ApiKeyModel:
    """
    Verify API key against database.

    Returns the ApiKeyModel; its ``user_id`` owns the scripts the caller
    may read and write.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    stmt = select(ApiKeyModel).where(
        ApiKeyModel.key_hash == hash_api_key(token),
        ApiKeyModel.is_active == True,  # noqa: E712
        ApiKeyModel.expires_at > datetime.utcnow(),
    )

    result = await db.execute(stmt)
    api_key = result.scalar_one_or_none()

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    api_key.last_used_at = datetime.utcnow()
    api_key.usage_count += 1
    await db.commit()

    return api_key
