"""
Pytest fixtures for the identity core tests.
"""

import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from kcnotes.config import Settings
from kcnotes.database import close_db, create_engine, create_session_maker, init_db
from kcnotes.kernel.identity import (
    IdentityService,
    JWTManager,
    PasswordHasher,
    RequestAuthenticator,
    SqlAlchemyUserRepository,
)
from kcnotes.kernel.models.user import User
from kcnotes.main import create_app

TEST_SECRET_KEY = "test-secret-key-for-testing-only"

# Lowest cost bcrypt accepts, keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key=TEST_SECRET_KEY,
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-based SQLite so every session sees the same database."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_maker(db_engine: AsyncEngine):
    return create_session_maker(db_engine)


@pytest.fixture
def user_repository(session_maker) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(session_maker)


@pytest.fixture
def identity_service(
    user_repository: SqlAlchemyUserRepository,
    password_hasher: PasswordHasher,
    jwt_manager: JWTManager,
) -> IdentityService:
    return IdentityService(
        users=user_repository,
        password_hasher=password_hasher,
        jwt_manager=jwt_manager,
    )


@pytest.fixture
def authenticator(
    jwt_manager: JWTManager,
    user_repository: SqlAlchemyUserRepository,
) -> RequestAuthenticator:
    return RequestAuthenticator(jwt_manager=jwt_manager, users=user_repository)


@pytest_asyncio.fixture
async def test_user(
    user_repository: SqlAlchemyUserRepository,
    password_hasher: PasswordHasher,
) -> User:
    """Create a test user with password 'secret1'."""
    return await user_repository.create(
        username=f"user-{uuid.uuid4().hex[:8]}",
        password_hash=password_hasher.hash("secret1"),
    )


@pytest.fixture
def auth_headers(test_user: User, jwt_manager: JWTManager) -> dict:
    """Create authentication headers for a test user."""
    token = jwt_manager.issue_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        secret_key=TEST_SECRET_KEY,
        access_token_expire_minutes=30,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        _env_file=None,
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings):
    """Application wired against a fresh SQLite database."""
    application = create_app(test_settings)
    await init_db(application.state.engine)
    yield application
    await close_db(application.state.engine)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
