"""Test configuration and fixtures."""

import os

# Point the app at SQLite and keep background workers off before anything is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("WORKERS_ENABLED", "false")
os.environ.setdefault("BEARER_TOKEN_SECRET", "test-secret")

from datetime import date, datetime, timedelta  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from arah_umroh.core.config import settings  # noqa: E402
from arah_umroh.core.database import Base, get_db  # noqa: E402
from arah_umroh.core.dependencies import CurrentUser  # noqa: E402
from arah_umroh.models import *  # noqa: F403,E402 - Import all models

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

AGENT_ID = "agent-1"
OTHER_AGENT_ID = "agent-2"
JAMAAH_ID = "jamaah-1"
SELLER_ID = "seller-1"
ADMIN_ID = "admin-1"


def make_token(user_id: str, roles: list[str], expires_in: int = 3600) -> str:
    """Sign a bearer token the way the identity provider does."""
    payload = {
        "sub": user_id,
        "email": f"{user_id}@example.com",
        "roles": roles,
        "exp": int((datetime.utcnow() + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, settings.bearer_token_secret, algorithm="HS256")


def auth_headers(user_id: str, roles: list[str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, roles)}"}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """The real application with its database dependency bound to the test session."""
    from arah_umroh.main import create_app

    app = create_app()

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def agent():
    return CurrentUser(user_id=AGENT_ID, roles=["agent"])


@pytest.fixture
def other_agent():
    return CurrentUser(user_id=OTHER_AGENT_ID, roles=["agent"])


@pytest.fixture
def jamaah():
    return CurrentUser(user_id=JAMAAH_ID, roles=["jamaah"])


@pytest.fixture
def admin():
    return CurrentUser(user_id=ADMIN_ID, roles=["admin"])


@pytest.fixture
def agent_headers():
    return auth_headers(AGENT_ID, ["agent"])


@pytest.fixture
def other_agent_headers():
    return auth_headers(OTHER_AGENT_ID, ["agent"])


@pytest.fixture
def jamaah_headers():
    return auth_headers(JAMAAH_ID, ["jamaah"])


@pytest.fixture
def headers_for():
    """Bearer headers for any user id, for tests that need several callers."""
    return auth_headers


@pytest.fixture
def seller_headers():
    return auth_headers(SELLER_ID, ["seller"])


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, ["admin"])


@pytest.fixture
def sample_travel_data():
    """Sample travel data for testing."""
    return {
        "name": "Al Hijrah Tour",
        "description": "Umroh berkah sejak 2005",
        "phone": "0211234567",
        "email": "info@alhijrah.example.com",
    }


@pytest.fixture
def sample_package_data():
    """Sample package data for testing; ``travel_id`` is filled in by the test."""
    return {
        "name": "Umroh Reguler 9 Hari",
        "description": "Paket umroh reguler dengan hotel dekat Masjidil Haram",
        "package_type": "umroh",
        "duration_days": 9,
        "hotel_makkah": "Hilton Makkah",
        "hotel_madinah": "Pullman Madinah",
        "hotel_star": 4,
        "airline": "Garuda Indonesia",
        "flight_type": "direct",
        "meal_type": "fullboard",
        "facilities": ["visa", "asuransi", "muthawif"],
    }


@pytest.fixture
def sample_departure_data():
    """Departure two months out with ten seats; ``package_id`` is filled in by the test."""
    departure_date = date.today() + timedelta(days=60)
    return {
        "departure_date": departure_date.isoformat(),
        "return_date": (departure_date + timedelta(days=9)).isoformat(),
        "price": 30_000_000,
        "original_price": 32_000_000,
        "total_seats": 10,
    }


@pytest.fixture
def sample_booking_data():
    """Booking contact details; package and departure ids are filled in by the test."""
    return {
        "number_of_pilgrims": 2,
        "contact_name": "Siti Aminah",
        "contact_phone": "081234567890",
        "contact_email": "siti@example.com",
    }


@pytest_asyncio.fixture
async def published_package(test_client, agent_headers, sample_travel_data, sample_package_data,
                            sample_departure_data):
    """A travel with one package and one departure, created through the API."""
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    assert response.status_code == 200, response.text
    travel = response.json()

    response = await test_client.post(
        "/v1/package/create",
        json={**sample_package_data, "travel_id": travel["id"]},
        headers=agent_headers,
    )
    assert response.status_code == 200, response.text
    package = response.json()

    response = await test_client.post(
        "/v1/package/departure/add",
        json={**sample_departure_data, "package_id": package["id"]},
        headers=agent_headers,
    )
    assert response.status_code == 200, response.text
    departure = response.json()

    return {"travel": travel, "package": package, "departure": departure}
