"""Pytest configuration and fixtures."""

import os
import sys
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Callable

# Test settings must be in place before the app modules read them
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="biolink-uploads-")
os.environ["PUBLIC_BASE_URL"] = "https://bio.example"
os.environ["APP_ENV"] = "test"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.exceptions import IdentityNotFoundError
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.identity.provider import IdentityUser
from infrastructure.storage.local_upload import LocalUploadService

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_ID = "100000000000000001"
OTHER_USER_ID = "100000000000000002"


class FakeIdentityProvider:
    """In-memory identity provider; ``error`` is raised on every lookup when set."""

    def __init__(self) -> None:
        self.users: dict[str, IdentityUser] = {}
        self.error: Exception | None = None
        self.calls: list[str] = []

    async def get_user(self, user_id: str) -> IdentityUser:
        self.calls.append(user_id)
        if self.error:
            raise self.error
        try:
            return self.users[user_id]
        except KeyError:
            raise IdentityNotFoundError(user_id) from None


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test.

    All sessions share one connection; reset-on-return is off so one
    session closing cannot roll back another's pending statements.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        pool_reset_on_return=None,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def other_user() -> TokenUser:
    """A second caller who does not own the test user's profile."""
    return TokenUser(id=OTHER_USER_ID, display_name="Other User")


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_headers(auth_provider: JWTAuthProvider, test_user: TokenUser) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_provider.create_token(test_user)}"}


@pytest.fixture
def other_auth_headers(auth_provider: JWTAuthProvider, other_user: TokenUser) -> dict[str, str]:
    """Authorization headers for the non-owner caller."""
    return {"Authorization": f"Bearer {auth_provider.create_token(other_user)}"}


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    """Identity provider that knows the test user."""
    provider = FakeIdentityProvider()
    provider.users[TEST_USER_ID] = IdentityUser(
        id=TEST_USER_ID,
        username="testuser",
        global_name="Test Global",
        discriminator="0",
        avatar_url="https://cdn.discordapp.com/avatars/100000000000000001/abc.png?size=512",
    )
    return provider


@pytest.fixture
def upload_service(tmp_path: Path) -> LocalUploadService:
    """Upload store in a temporary directory with small limits."""
    return LocalUploadService(
        upload_dir=str(tmp_path / "uploads"),
        url_prefix="/uploads",
        avatar_max_bytes=1024,
        background_max_bytes=4096,
    )


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    identity_provider: FakeIdentityProvider,
    upload_service: LocalUploadService,
) -> FastAPI:
    """
    Application wired to the test database and fake collaborators.

    Bearer tokens are validated for real with the test auth provider so
    optional and required auth both behave as in production.
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_identity_provider,
        get_merge_engine,
        get_profile_service,
        get_view_counter_service,
    )
    from domain.services.profile_service import ProfileService
    from domain.services.view_counter_service import ViewCounterService
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    def override_get_auth_provider() -> JWTAuthProvider:
        return auth_provider

    def override_get_identity_provider() -> FakeIdentityProvider:
        return identity_provider

    def override_get_profile_service() -> ProfileService:
        return ProfileService(
            uow_factory,
            merge_engine=get_merge_engine(),
            identity_provider=identity_provider,
            upload_service=upload_service,
        )

    def override_get_view_counter_service() -> ViewCounterService:
        return ViewCounterService(uow_factory)

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_auth_provider] = override_get_auth_provider
    app.dependency_overrides[get_identity_provider] = override_get_identity_provider
    app.dependency_overrides[get_profile_service] = override_get_profile_service
    app.dependency_overrides[get_view_counter_service] = override_get_view_counter_service
    app.dependency_overrides[get_async_session] = override_get_async_session
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
