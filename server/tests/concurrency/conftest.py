"""Fixtures for firing API requests in parallel.

Every request gets its own session and connection on a file database, so
overlapping requests interleave the way they do against a real server.
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from arah_umroh.core.database import Base, get_db


@pytest_asyncio.fixture(scope="function")
async def parallel_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        poolclass=NullPool,
        # Seconds a writer waits for SQLite's database lock
        connect_args={"timeout": 30},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def parallel_client(parallel_engine):
    """API client whose requests each open a fresh session."""
    from arah_umroh.main import create_app

    session_factory = async_sessionmaker(parallel_engine, class_=AsyncSession, expire_on_commit=False)
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def parallel_package(parallel_client, agent_headers, sample_travel_data, sample_package_data,
                           sample_departure_data):
    """A travel with one package and a ten-seat departure on the parallel database."""
    response = await parallel_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    assert response.status_code == 200, response.text
    travel = response.json()

    response = await parallel_client.post(
        "/v1/package/create",
        json={**sample_package_data, "travel_id": travel["id"]},
        headers=agent_headers,
    )
    assert response.status_code == 200, response.text
    package = response.json()

    response = await parallel_client.post(
        "/v1/package/departure/add",
        json={**sample_departure_data, "package_id": package["id"]},
        headers=agent_headers,
    )
    assert response.status_code == 200, response.text

    return {"travel": travel, "package": package, "departure": response.json()}
