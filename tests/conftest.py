import os

# Settings are read at import time; configure before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TOKEN_PEPPER", "test-pepper")
os.environ.setdefault("ENV", "test")
os.environ["TELEMETRY_ENABLED"] = "false"

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base via the models package so metadata is complete
from listing_hub.models import Base
from listing_hub.main import app
from listing_hub.core.db import get_db
from listing_hub.services.notifications import ListingNotification, get_notifier
from listing_hub.services.storage import LocalObjectStore, get_object_store

from tests.fixtures_seed import (  # noqa: F401
    agent,
    fsbo,
    ghana_admin,
    ghana_fsbo,
    guyana_admin,
    super_admin,
)


def _test_db_url(tmp_path) -> str:
    url = os.getenv("DATABASE_URL_TEST")
    if url:
        return url
    return f"sqlite+aiosqlite:///{tmp_path / 'listing_hub_test.db'}"


class RecordingNotifier:
    def __init__(self):
        self.sent: list[ListingNotification] = []
        self.fail = False

    def send(self, notification: ListingNotification) -> None:
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.sent.append(notification)

    def events(self) -> list[str]:
        return [n.event for n in self.sent]


@pytest.fixture
async def async_engine(tmp_path):
    engine = create_async_engine(_test_db_url(tmp_path))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(tmp_path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "media", "https://media.test")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def client(session_factory, store, notifier):
    """
    HTTP client against the app; each request gets its own session on the
    test database, plus the temp object store and recording notifier.
    """
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
