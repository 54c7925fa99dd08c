import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest

from fakes import BASE_URL, REPO_ID, FakeGitHub

from app.services.gatekeeper import Gatekeeper

@pytest.fixture
def github() -> FakeGitHub:
    fake = FakeGitHub()
    fake.repositories[REPO_ID] = ("octocat", "Hello-World")
    return fake

@pytest.fixture
async def http_client(github):
    client = github.http_client()
    yield client
    await client.aclose()

@pytest.fixture
def gatekeeper(http_client) -> Gatekeeper:
    return Gatekeeper(base_url=BASE_URL, timeout=2.0, http_client=http_client)


@pytest.fixture
async def session_factory():
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool
    from sqlmodel import SQLModel
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.db import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session
