"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from usermgmt.core.auth import PasswordHasher
from usermgmt.core.database import Base, build_engine, build_session_factory, get_db
from usermgmt.main import create_app

# Import all models to ensure they're registered with Base.metadata
from usermgmt.modules.api_clients.models import ApiClient
from usermgmt.modules.api_clients.repos import ApiClientRepository
from usermgmt.modules.users.models import User  # noqa: F401
from usermgmt.modules.users.repos import UserRepository
from usermgmt.modules.users.services import UserService


# Private in-memory database; StaticPool keeps the single connection alive
TEST_DATABASE_URL = "sqlite+aiosqlite://"

TENANT_API_KEY = "tenant-one-test-key"
OTHER_TENANT_API_KEY = "tenant-two-test-key"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh test database engine with all tables."""
    engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    Every test gets its own in-memory database, so nothing needs to be
    rolled back between tests.
    """
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Tenant and Service Fixtures
# ============================================================


@pytest.fixture
async def tenant(db: AsyncSession) -> ApiClient:
    """Create the primary test API client.

    Returns:
        A persisted, active ApiClient whose key is TENANT_API_KEY
    """
    return await ApiClientRepository(db).create("Tenant One", TENANT_API_KEY)


@pytest.fixture
async def other_tenant(db: AsyncSession) -> ApiClient:
    """Create a second, unrelated API client."""
    return await ApiClientRepository(db).create("Tenant Two", OTHER_TENANT_API_KEY)


@pytest.fixture
def tenant_headers(tenant: ApiClient) -> dict[str, str]:
    """Headers authenticating as the primary test tenant."""
    return {"X-API-Key": TENANT_API_KEY}


@pytest.fixture
def other_tenant_headers(other_tenant: ApiClient) -> dict[str, str]:
    """Headers authenticating as the second test tenant."""
    return {"X-API-Key": OTHER_TENANT_API_KEY}


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    """Provide the password hasher with production parameters."""
    return PasswordHasher()


@pytest.fixture
def user_service(db: AsyncSession, hasher: PasswordHasher) -> UserService:
    """Provide a user service backed by the test database."""
    return UserService(UserRepository(db), hasher)
