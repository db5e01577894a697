from types import MappingProxyType

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from floris.auth import create_access_token
from floris.db import database
from floris.db.operations import get_or_create_user
from floris.main import app
from floris.models.db import Base, UserDB
from floris.models.flower import ItemDefinition, Rarity
from floris.services.catalog import Catalog


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine, monkeypatch):
    """Provide an async test client whose request sessions use the test engine."""
    monkeypatch.setattr(
        database,
        "async_session_factory",
        async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False),
    )

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def catalog() -> Catalog:
    """A small catalog with every rarity represented."""
    flowers = [
        ItemDefinition(id=1, name="Daisy", rarity=Rarity.COMMON, price=30, image="/f/daisy.png"),
        ItemDefinition(id=2, name="Tulip", rarity=Rarity.COMMON, price=40, image="/f/tulip.png"),
        ItemDefinition(id=3, name="Rose", rarity=Rarity.RARE, price=120, image="/f/rose.png"),
        ItemDefinition(
            id=4, name="Lotus", rarity=Rarity.LEGENDARY, price=500, image="/f/lotus.png"
        ),
    ]
    return MappingProxyType({f.id: f for f in flowers})


@pytest.fixture
async def user(session: AsyncSession) -> UserDB:
    """A freshly signed-up user with the default starting balance."""
    user, _ = await get_or_create_user(session, "kakao-1001", nickname="Gardener")
    await session.commit()
    return user


@pytest.fixture
async def other_user(session: AsyncSession) -> UserDB:
    user, _ = await get_or_create_user(session, "kakao-2002", nickname="Friend")
    await session.commit()
    return user


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
