"""Shared fixtures: a throwaway SQLite database per test and an API client."""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

import tasker.models  # noqa: F401  registers tables on Base.metadata
from tasker.ai.service import AIService
from tasker.api.v1.ai import get_ai_service
from tasker.config import Settings
from tasker.db.base import Base
from tasker.db.session import (
    build_engine,
    build_session_factory,
    get_db_session,
    get_log_session_factory,
)
from tasker.main import create_app
from tests.upstream import UpstreamRecorder


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        gemini_api_key="",
        openai_api_key="",
        anthropic_api_key="",
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasker.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def upstream() -> UpstreamRecorder:
    return UpstreamRecorder()


@pytest_asyncio.fixture
async def http_client(upstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client


@pytest.fixture
def ai_service(db, settings, session_factory, http_client) -> AIService:
    return AIService(db, settings=settings, log_session_factory=session_factory, http_client=http_client)


@pytest_asyncio.fixture
async def client(session_factory, settings, http_client) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_ai_service(db: AsyncSession = Depends(get_db_session)) -> AIService:
        return AIService(db, settings=settings, log_session_factory=session_factory, http_client=http_client)

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_log_session_factory] = lambda: session_factory
    app.dependency_overrides[get_ai_service] = override_get_ai_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
