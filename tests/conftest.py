"""
Pytest configuration and fixtures for hitome tests.
"""

import pytest
from datetime import datetime, timedelta
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# Import app components
from hitome.main import app
from hitome.config import Settings, settings
from hitome.database.connection import Base, get_db, make_engine, make_session_factory
from hitome.models import (
    User,
    Store,
    StoreUser,
    StoreRole,
    Session,
    Thread,
    ThreadStatus,
    ChannelType,
)


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

LINE_SECRET = "test-line-channel-secret"
LINE_TOKEN = "test-line-access-token"


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = make_engine(TEST_DATABASE_URL)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = make_session_factory(test_engine)

    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
async def client(test_engine) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    async_session_factory = make_session_factory(test_engine)

    # Override the get_db dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    # Create test client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        DEBUG=True,
        DATABASE_URL=TEST_DATABASE_URL,
        COOKIE_SECURE=False,
    )


@pytest.fixture
def line_env(monkeypatch):
    """Configure the environment-level LINE channel."""
    monkeypatch.setattr(settings, "LINE_CHANNEL_ID", None)
    monkeypatch.setattr(settings, "LINE_CHANNEL_SECRET", LINE_SECRET)
    monkeypatch.setattr(settings, "LINE_CHANNEL_ACCESS_TOKEN", LINE_TOKEN)
    return settings


@pytest.fixture
def no_line_env(monkeypatch):
    """Make sure no environment-level LINE channel is configured."""
    monkeypatch.setattr(settings, "LINE_CHANNEL_ID", None)
    monkeypatch.setattr(settings, "LINE_CHANNEL_SECRET", None)
    monkeypatch.setattr(settings, "LINE_CHANNEL_ACCESS_TOKEN", None)
    return settings


async def make_user(db: AsyncSession, line_user_id: str = "Uowner0001", name: str = "Owner") -> User:
    user = User(line_user_id=line_user_id, name=name)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_store(
    db: AsyncSession,
    owner: User,
    name: str = "Hair Salon Hitome",
    role: StoreRole = StoreRole.OWNER,
    **fields,
) -> Store:
    store = Store(
        name=name,
        owner_id=owner.id,
        business_hours_start="10:00",
        business_hours_end="20:00",
        **fields,
    )
    db.add(store)
    await db.flush()
    db.add(StoreUser(store_id=store.id, user_id=owner.id, role=role))
    await db.commit()
    await db.refresh(store)
    return store


async def make_session(db: AsyncSession, user: User, store: Store = None) -> Session:
    session = Session(
        user_id=user.id,
        store_id=store.id if store else None,
        expires_at=datetime.utcnow() + timedelta(days=30),
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    return session


async def make_thread(db: AsyncSession, store: Store = None, **fields) -> Thread:
    values = {
        "channel": ChannelType.LINE,
        "user_name": "田中 美咲",
        "user_id": "Ucustomer0001",
        "status": ThreadStatus.UNHANDLED,
        "tags": ["question"],
        "last_message": "こんにちは",
    }
    values.update(fields)
    thread = Thread(store_id=store.id if store else None, **values)
    db.add(thread)
    await db.commit()
    await db.refresh(thread)
    return thread


def cookie_for(session: Session) -> dict:
    """Request headers carrying the session cookie."""
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={session.id}"}


@pytest.fixture
async def owner(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest.fixture
async def store(db_session: AsyncSession, owner: User) -> Store:
    return await make_store(db_session, owner)


@pytest.fixture
async def login(db_session: AsyncSession, owner: User, store: Store) -> Session:
    """A login session for the owner with the store selected."""
    return await make_session(db_session, owner, store)


@pytest.fixture
def auth_headers(login: Session) -> dict:
    return cookie_for(login)


@pytest.fixture
def admin(monkeypatch, owner: User) -> User:
    """Make the owner an administrator of the unassigned inbox and global words."""
    monkeypatch.setattr(settings, "ADMIN_LINE_USER_IDS", [owner.line_user_id])
    return owner
