import os

# Use in-memory SQLite for tests by default, unless TEST_DATABASE_URL is set
TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", TEST_DB_URL)

from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from smartwaste.config import get_settings
from smartwaste.database import Base, get_db
from smartwaste.main import app
from smartwaste.models import Bin, Driver
from tests.fixtures.test_data import generate_bins, generate_drivers


@pytest.fixture
async def test_engine():
    """Fresh test database engine per test."""
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DB_URL else {},
        poolclass=StaticPool if "sqlite" in TEST_DB_URL else None,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Function-scoped DB session."""
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client with override for get_db."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def strict_transitions():
    """Turn on forward-only status changes for one test."""
    settings = get_settings()
    previous = settings.strict_transitions
    settings.strict_transitions = True
    yield settings
    settings.strict_transitions = previous


@pytest.fixture
async def sample_bins(db_session):
    """20 bins around the city centre, 20% overflowing."""
    bins = []
    for data in generate_bins(count=20, overflow_ratio=0.2):
        bin_ = Bin(**data)
        db_session.add(bin_)
        bins.append(bin_)
    await db_session.commit()
    return bins


@pytest.fixture
async def sample_drivers(db_session):
    """4 available drivers, half with a known position."""
    drivers = []
    for data in generate_drivers(count=4):
        driver = Driver(**data)
        db_session.add(driver)
        drivers.append(driver)
    await db_session.commit()
    return drivers
