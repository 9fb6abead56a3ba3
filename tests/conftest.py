"""Pytest configuration for all tests."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from filedepot.core.config import Settings
from filedepot.infrastructure.persistence.database import Base
from filedepot.infrastructure.persistence import models  # noqa: F401


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing storage and temp buffers at a per-test directory."""
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        upload_base_path=str(tmp_path / "uploads"),
        upload_tmp_path=str(tmp_dir),
        log_format="console",
        log_level="WARNING",
    )


@pytest.fixture
def make_tmp_file(settings: Settings):
    """Write a temporary upload file and return its path."""
    counter = {"n": 0}

    def _make(content: bytes = b"hello world") -> str:
        counter["n"] += 1
        path = Path(settings.upload_tmp_path) / f"php_tmp_{counter['n']}"
        path.write_bytes(content)
        return str(path)

    return _make


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Create an application bound to the per-test settings.

    The ASGI transport does not run the lifespan, so startup is done here.
    """
    from filedepot.infrastructure.api.app import create_app
    from filedepot.infrastructure.persistence.database import init_database

    application = create_app(settings)
    application.state.storage.ensure_directories()
    await init_database(application.state.db)

    yield application

    await application.state.db.disconnect()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client for the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
