"""
Shared test fixtures for the room reservation test suite.

Async throughout (aiosqlite + AsyncSession); the HTTP app is driven through
httpx's ASGITransport.
"""

import os
import sys
from collections.abc import Awaitable, Callable
from datetime import date
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.room import Room, RoomCategory
from app.models.user import Role, User
from app.schemas.booking import CreateBookingCommand
from app.services.identity import create_user

API = "/api/v1"

# One in-memory database shared by every session in a test
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


# ── Users ───────────────────────────────────────────────────────────
@pytest.fixture
async def guest(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, name="Grace Guest", email="grace@example.com", password="secret123"
    )


@pytest.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, name="Oscar Other", email="oscar@example.com", password="secret123"
    )


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(
        db_session,
        name="Ada Admin",
        email="ada@example.com",
        password="adminpass1",
        role=Role.ADMIN,
    )


# ── Rooms ───────────────────────────────────────────────────────────
async def _add_room(db: AsyncSession, number: int) -> Room:
    room = Room(
        name=f"Room {number}",
        number=number,
        category=RoomCategory.DELUXE.value,
        description="Sea view",
        price=120.0,
        capacity=2,
        amenities=["WiFi", "TV"],
        is_available=True,
    )
    db.add(room)
    await db.commit()
    await db.refresh(room)
    return room


@pytest.fixture
async def room(db_session: AsyncSession) -> Room:
    return await _add_room(db_session, 101)


@pytest.fixture
async def second_room(db_session: AsyncSession) -> Room:
    return await _add_room(db_session, 102)


# ── Helpers ─────────────────────────────────────────────────────────
@pytest.fixture
def stay() -> Callable[..., CreateBookingCommand]:
    """Build a booking command for *room_id* between two ISO dates."""

    def _stay(room_id: int, check_in: str, check_out: str) -> CreateBookingCommand:
        return CreateBookingCommand(
            room_id=room_id,
            check_in=date.fromisoformat(check_in),
            check_out=date.fromisoformat(check_out),
            name="Grace Guest",
            email="grace@example.com",
            phone="0123456789",
        )

    return _stay


@pytest.fixture
def login(async_client: AsyncClient) -> Callable[[str, str], Awaitable[dict[str, str]]]:
    """Log in over HTTP and return Authorization headers for the new session."""

    async def _login(email: str, password: str) -> dict[str, str]:
        resp = await async_client.post(
            f"{API}/auth/login", data={"username": email, "password": password}
        )
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
async def guest_headers(guest: User, login) -> dict[str, str]:
    return await login("grace@example.com", "secret123")


@pytest.fixture
async def other_headers(other_guest: User, login) -> dict[str, str]:
    return await login("oscar@example.com", "secret123")


@pytest.fixture
async def admin_headers(admin: User, login) -> dict[str, str]:
    return await login("ada@example.com", "adminpass1")
