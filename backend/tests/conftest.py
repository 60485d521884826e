# tests/conftest.py — Shared test fixtures
import os
import uuid
import tempfile

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Use SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("BUSINESS_UPLOAD_DIR", tempfile.mkdtemp(prefix="taskhub-uploads-"))

from models import Base, Role, RoleName, User, utcnow
from auth import AuthService
from database import get_db_session, enable_sqlite_foreign_keys, init_db
from images import ImageStore
from main import app

TEST_PASSWORD = "TestPassword123!"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    enable_sqlite_foreign_keys(engine)
    await init_db(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_engine):
    """HTTP test client with overridden DB dependency"""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(str(tmp_path / "images"))


async def make_user(session: AsyncSession, name: str, email: str, role: RoleName) -> User:
    result = await session.execute(select(Role).where(Role.name == role.value))
    user = User(
        id=str(uuid.uuid4()),
        name=name,
        email=email,
        password_hash=AuthService.hash_password(TEST_PASSWORD),
        role=result.scalar_one(),
        created_at=utcnow(),
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def test_user(db_session):
    """Create a test user"""
    return await make_user(db_session, "Test User", "testuser@taskhub.dev", RoleName.USER)


@pytest_asyncio.fixture
async def other_user(db_session):
    """A second regular user"""
    return await make_user(db_session, "Other User", "other@taskhub.dev", RoleName.USER)


@pytest_asyncio.fixture
async def admin_user(db_session):
    """Create an admin user"""
    return await make_user(db_session, "Admin User", "admin@taskhub.dev", RoleName.ADMIN)


def get_auth_headers(user: User) -> dict:
    """Generate auth headers for a user"""
    token_data = {
        "sub": user.id,
        "email": user.email,
        "role": user.role.name,
    }
    token = AuthService.create_access_token(token_data)
    return {"Authorization": f"Bearer {token}"}
