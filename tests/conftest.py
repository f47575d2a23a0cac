"""
HRMS - Test Configuration

Pytest fixtures and configuration.
"""

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_async_session
from app.dependencies import get_cache
from app.models.employee import Employee
from app.models.leave import LeaveType
from app.models.organization_structure import Department, Position
from app.models.user import User
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.services.events import EventDispatcher
from app.utils.security import create_access_token, get_password_hash
from main import app


# In-memory SQLite shared by every connection of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Cache handle that always misses."""
    cache = AsyncMock(spec=CacheService)
    cache.get.return_value = None
    cache.get_json.return_value = None
    cache.get_statistics.return_value = None
    cache.set_statistics.return_value = True
    cache.invalidate_statistics.return_value = True
    cache.health_check.return_value = {"status": "healthy", "connected": True}
    return cache


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, mock_cache: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and cache overrides."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session
    app.dependency_overrides[get_cache] = lambda: mock_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def context(mock_cache: AsyncMock) -> RequestContext:
    """Service context with no subscribers, for calling services directly."""
    return RequestContext(
        actor_id=None,
        actor_name="tester",
        cache=mock_cache,
        events=EventDispatcher(),
    )


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="hr.admin@example.com",
        name="HR Admin",
        hashed_password=get_password_hash("TestPassword123!"),
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Generate authorization headers for test user."""
    token = create_access_token(data={"sub": str(test_user.id), "email": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_employee(db_session: AsyncSession) -> Employee:
    """Create a test employee."""
    employee = Employee(
        organization="SMRU",
        staff_id="EMP001",
        initial_en="Mr.",
        first_name_en="John",
        last_name_en="Doe",
        gender="M",
        date_of_birth=date(1990, 5, 15),
        status="Local ID Staff",
        mobile_phone="0812345678",
        created_by="tester",
        updated_by="tester",
    )
    db_session.add(employee)
    await db_session.commit()
    await db_session.refresh(employee)
    return employee


@pytest_asyncio.fixture
async def test_leave_type(db_session: AsyncSession) -> LeaveType:
    """Create a test leave type."""
    leave_type = LeaveType(
        name="Annual Leave",
        default_duration=Decimal("12"),
        description="Paid annual leave",
        requires_attachment=False,
    )
    db_session.add(leave_type)
    await db_session.commit()
    await db_session.refresh(leave_type)
    return leave_type


@pytest_asyncio.fixture
async def test_department(db_session: AsyncSession) -> Department:
    """Create a test department."""
    department = Department(name="Laboratory", description="Lab services", is_active=True)
    db_session.add(department)
    await db_session.commit()
    await db_session.refresh(department)
    return department


@pytest_asyncio.fixture
async def test_position(db_session: AsyncSession, test_department: Department) -> Position:
    """Create a level 1 manager position in the test department."""
    position = Position(
        department_id=test_department.id,
        title="Lab Manager",
        level=1,
        is_manager=True,
        is_active=True,
    )
    db_session.add(position)
    await db_session.commit()
    await db_session.refresh(position)
    return position
