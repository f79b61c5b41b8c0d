"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own in-memory SQLite database, shared by the test
session and the app through a single StaticPool connection. "Today" is
pinned so calendar and past-date rules are deterministic.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hall_booking.main import app
from hall_booking.api.deps import get_today
from hall_booking.db.base import Base
from hall_booking.db.session import get_db
from hall_booking.core.security import Actor, create_access_token, hash_password
from hall_booking.models.user import User
from hall_booking.models.hall import Hall
from hall_booking.models.hall_booked_date import HallBookedDate

TEST_DATABASE_URL = "sqlite+aiosqlite://"

TODAY = date(2025, 3, 1)
BOOKED_DATE = date(2025, 3, 10)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables on a fresh database, yield a session, dispose the engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, today: date) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB session and today's date overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: today

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, **fields) -> User:
    user = User(hashed_password=hash_password("testpassword123"), **fields)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user in the database."""
    return await _create_user(
        db_session,
        email="test@example.com",
        username="testuser",
        display_name="Test User",
    )


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        email="other@example.com",
        username="otheruser",
        display_name="Other User",
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        email="admin@example.com",
        username="admin",
        display_name="Center Admin",
        is_admin=True,
    )


@pytest.fixture
def actor(test_user: User) -> Actor:
    return Actor.from_user(test_user)


@pytest.fixture
def other_actor(other_user: User) -> Actor:
    return Actor.from_user(other_user)


@pytest.fixture
def admin_actor(admin_user: User) -> Actor:
    return Actor.from_user(admin_user)


@pytest_asyncio.fixture
async def auth_token(test_user: User) -> str:
    """Generate a JWT token for the test user."""
    return create_access_token(data={"sub": str(test_user.id)})


@pytest_asyncio.fixture
async def auth_headers(auth_token: str) -> dict:
    """Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(other_user.id)})}"}


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(admin_user.id)})}"}


@pytest_asyncio.fixture
async def test_hall(db_session: AsyncSession) -> Hall:
    """Innovation Lab: 2000/hour, 20 seats, already booked on 2025-03-10."""
    hall = Hall(
        name="Innovation Lab",
        description="Open floor with twelve FDM printers",
        capacity=20,
        equipment_included=["3D printers", "Projector"],
        images=[],
        hourly_rate=2000,
        is_available=True,
        location="Block B, ground floor",
    )
    hall.reserved_dates = [HallBookedDate(booked_on=BOOKED_DATE)]
    db_session.add(hall)
    await db_session.commit()
    await db_session.refresh(hall)
    return hall


@pytest_asyncio.fixture
async def closed_hall(db_session: AsyncSession) -> Hall:
    """A hall that is not accepting bookings."""
    hall = Hall(
        name="Resin Room",
        capacity=6,
        equipment_included=["SLA printer"],
        images=[],
        hourly_rate=3500,
        is_available=False,
    )
    db_session.add(hall)
    await db_session.commit()
    await db_session.refresh(hall)
    return hall


@pytest.fixture
def booked_dates(db_session: AsyncSession):
    """Read a hall's reserved dates straight from hall_booked_dates."""

    async def _read(hall_id: int) -> list[date]:
        result = await db_session.execute(
            select(HallBookedDate.booked_on)
            .where(HallBookedDate.hall_id == hall_id)
            .order_by(HallBookedDate.booked_on.asc())
        )
        return list(result.scalars().all())

    return _read
