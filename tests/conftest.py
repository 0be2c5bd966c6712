"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta
from typing import Any, AsyncGenerator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.dependencies import generate_api_key, get_db, get_llm, get_redis
from api.main import app
from core.db_models import ApiKeyModel, Base
from core.exceptions import LLMException
from core.models import Scene
from llm.base import BaseLLMProvider


class FakeLLMProvider(BaseLLMProvider):
    """In-memory provider that records prompts and replays canned replies."""

    def __init__(self, reply: str = "INT. HALLWAY - DAY\nANNA hurries past BEN.") -> None:
        super().__init__({})
        self.reply = reply
        self.fail = False
        self.healthy = True
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        **kwargs: Any,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "system_prompt": system_prompt, "max_tokens": max_tokens}
        )
        if self.fail:
            raise LLMException("provider down", details={"provider": "fake"})
        return self.reply

    async def generate_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
        **kwargs: Any,
    ) -> str:
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if self.fail:
            raise LLMException("provider down", details={"provider": "fake"})
        return self.reply

    async def health_check(self) -> bool:
        return self.healthy

    @property
    def provider_name(self) -> str:
        return "fake"


class MockRedis:
    """Just enough of ``redis.asyncio.Redis`` for rate limiting and readiness."""

    def __init__(self):
        self._store: dict[str, int] = {}

    async def ping(self):
        return True

    async def incr(self, key: str) -> int:
        self._store[key] = self._store.get(key, 0) + 1
        return self._store[key]

    async def expire(self, key: str, seconds: int) -> bool:
        return True

    async def ttl(self, key: str) -> int:
        return 60

    async def aclose(self):
        pass


def make_scene(title: str, content: str = "", characters: list[str] | None = None) -> Scene:
    return Scene(title=title, content=content or f"{title}\nAction.", characters=characters or [])


@pytest.fixture
def scenes() -> tuple[Scene, ...]:
    """Three ordinary scenes with overlapping casts."""
    return (
        make_scene("INT. HOUSE - DAY", characters=["ANNA", "BEN"]),
        make_scene("EXT. PARK - NIGHT", characters=["BEN", "CARL"]),
        make_scene("INT. CAR - DAWN", characters=["ANNA"]),
    )


@pytest.fixture
async def test_engine():
    """Create test database engine (shared in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
def override_dependencies(db_session, fake_llm):
    """Override database, Redis and LLM dependencies."""

    async def _get_db():
        yield db_session

    async def _get_redis():
        yield MockRedis()

    async def _get_llm():
        return fake_llm

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis] = _get_redis
    app.dependency_overrides[get_llm] = _get_llm
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create_api_key(db_session: AsyncSession, user_id: str) -> tuple[str, ApiKeyModel]:
    api_key, key_hash = generate_api_key()
    api_key_model = ApiKeyModel(
        id=uuid4(),
        user_id=user_id,
        key_hash=key_hash,
        name=f"Test key for {user_id}",
        is_active=True,
        created_at=datetime.utcnow(),
        expires_at=datetime.utcnow() + timedelta(days=365),
        usage_count=0,
    )
    db_session.add(api_key_model)
    await db_session.commit()
    return api_key, api_key_model


@pytest.fixture
async def test_api_key(db_session) -> tuple[str, ApiKeyModel]:
    """Create a test API key in the database."""
    return await _create_api_key(db_session, "test-user-123")


@pytest.fixture
async def test_api_key_user2(db_session) -> tuple[str, ApiKeyModel]:
    """Create a second test API key for a different user."""
    return await _create_api_key(db_session, "test-user-456")


@pytest.fixture
async def auth_headers(test_api_key) -> dict[str, str]:
    api_key, _ = test_api_key
    return {"Authorization": f"Bearer {api_key}"}


@pytest.fixture
async def auth_headers_user2(test_api_key_user2) -> dict[str, str]:
    api_key, _ = test_api_key_user2
    return {"Authorization": f"Bearer {api_key}"}
