"""Shared fixtures for integration tests.

Every test gets its own in-memory SQLite database with the full schema. The
``client_with_db`` fixture runs the real application against that database
by overriding the ``get_db`` dependency; the override commits after each
successful request and rolls back on errors, like the production session.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.api.main import create_app
from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import _configured_sensitive_fields
from src.core.logging import _state
from src.infrastructure.database.base import Base
from src.infrastructure.database.dependencies import get_db
from src.infrastructure.database.session import (
    _db_manager,
    close_database,
    create_database_engine,
)

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _configured_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _configured_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None]:
    """Keep Loguru quiet and prevent app creation from adding sinks."""
    logger.remove()
    _state.configured = True
    yield
    _state.configured = True
    logger.remove()


@pytest.fixture(autouse=True)
async def clean_database_connections() -> AsyncGenerator[None]:
    """Dispose the process-wide engine after each test."""
    yield
    await close_database()
    _db_manager.reset()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """A fresh in-memory database with every table created."""
    engine = create_database_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """A session on the test database."""
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Test client for an app using the process-wide engine."""
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client_with_db(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Test client whose requests all use the test database session."""
    test_app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    test_app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    test_app.dependency_overrides.clear()
