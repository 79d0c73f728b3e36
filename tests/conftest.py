"""
Test infrastructure for the Forum API.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance in CI.
- StaticPool forces every async task onto the same in-memory connection;
  a second connection would see an empty database.
- The app's get_db dependency is overridden so every request uses the test
  session factory.
- Tables are created before each test and dropped after it.
- Access tokens are signed with the configured SECRET_KEY, the same way
  the external auth service signs them.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from forum_api.config import settings
from forum_api.database import Base, get_db
from forum_api.main import app
from forum_api.middleware import install_query_counter
from forum_api.models import User
from forum_api.repositories import (
    InMemoryCommentRepository,
    InMemoryStore,
    InMemoryThreadRepository,
    InMemoryUserRepository,
)

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_token(user_id: str, **claims) -> str:
    return jwt.encode({"id": user_id, **claims}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def _auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(user_id)}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that talk to the SQL repositories directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def seed_users():
    """Insert two users (``alice`` owns things, ``bob`` is the other party)."""
    async with async_session_test() as session:
        session.add_all([
            User(id="user-alice", username="alice", fullname="Alice Doe"),
            User(id="user-bob", username="bob", fullname="Bob Roe"),
        ])
        await session.commit()
    return {"alice": "user-alice", "bob": "user-bob"}


@pytest.fixture
def memory_repos():
    """In-memory thread/comment/user repositories sharing one store."""
    store = InMemoryStore()
    return (
        store,
        InMemoryThreadRepository(store),
        InMemoryCommentRepository(store),
        InMemoryUserRepository(store),
    )


@pytest.fixture
def make_token():
    return _make_token


@pytest.fixture
def auth_headers():
    return _auth_headers
