"""Service test fixtures — in-memory store, seed helpers, fake provider, API client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Services receive a DatabaseSessionManager bound to that database
    - The generation provider is a fake that counts calls (no network)
    - The streak clock is fixed and advanced explicitly by tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service tests
      (ADR: PostgreSQL-specific locking not exercised here)
    - Store built with __new__: reuses the test engine instead of creating a pooled one
    - Seed data written through the store itself, read back with fresh sessions
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from kondo.api.dependencies import get_streak_tracker
from kondo.config import Settings
from kondo.db.base import Base
from kondo.infrastructure.database import DatabaseSessionManager
from kondo.main import app
from kondo.models.collection import Collection
from kondo.models.content_item import ContentItem
from kondo.models.language import Language
from kondo.models.user import User
from kondo.services.artifact_generators import ArtifactGenerators
from kondo.services.cascade_deletion import CascadeDeletionService
from kondo.services.derivation_cache import DerivationCache
from kondo.services.import_service import ImportService
from kondo.services.sharing_service import SharingService
from kondo.services.streak_tracker import StreakTracker
from tests.services.fakes import SAMPLE_CONTENT, FakeProvider, FixedClock


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def store(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def settings():
    return Settings(import_batch_size=2)


# ─── Fakes ───────────────────────────────────────────────────────

@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))


# ─── Services ────────────────────────────────────────────────────

@pytest.fixture
def streaks(store, clock):
    return StreakTracker(store, clock=clock)


@pytest.fixture
def sharing(store, settings):
    return SharingService(store, settings)


@pytest.fixture
def imports(store, streaks, settings):
    return ImportService(store, streaks, settings)


@pytest.fixture
def deletion(store):
    return CascadeDeletionService(store)


@pytest.fixture
def cache(store, fake_provider):
    return DerivationCache(store, ArtifactGenerators(fake_provider))


# ─── Seed data ───────────────────────────────────────────────────

class Seeder:
    """Writes fixture rows through the store and reads them back."""

    def __init__(self, store: DatabaseSessionManager):
        self.store = store
        self._tick = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _next_time(self) -> datetime:
        self._tick += timedelta(seconds=1)
        return self._tick

    async def language(self, code: str = "ja", name: str = "Japanese") -> Language:
        async with self.store.transaction() as db:
            language = Language(code=code, name=name)
            db.add(language)
        return language

    async def user(
        self, alias: str | None = None, public: bool = True, language=None,
    ) -> User:
        async with self.store.transaction() as db:
            user = User(
                email=f"{alias or 'anon'}-{self._next_time().timestamp()}@example.com",
                alias=alias,
                is_alias_public=public,
                language_id=language.id if language else None,
            )
            db.add(user)
        return user

    async def collection(self, user: User, title: str, language=None) -> Collection:
        async with self.store.transaction() as db:
            collection = Collection(
                user_id=user.id,
                title=title,
                language_id=language.id if language else None,
                created_at=self._next_time(),
                updated_at=self._tick,
            )
            db.add(collection)
        return collection

    async def item(
        self,
        user: User,
        content: str = SAMPLE_CONTENT,
        language=None,
        collections: list[Collection] = (),
        **artifacts,
    ) -> ContentItem:
        async with self.store.transaction() as db:
            members = [await db.get(Collection, c.id) for c in collections]
            item = ContentItem(
                user_id=user.id,
                content=content,
                language_id=language.id if language else None,
                collections=members,
                **artifacts,
            )
            db.add(item)
        return item

    async def get(self, model, key):
        async with self.store.session() as db:
            return await db.get(model, key)

    async def all(self, model, *where):
        async with self.store.session() as db:
            result = await db.execute(select(model).where(*where))
            return list(result.scalars().all())


@pytest.fixture
def seed(store):
    return Seeder(store)


# ─── API client ──────────────────────────────────────────────────

@pytest.fixture
async def client(store, fake_provider, clock):
    """FastAPI test client with store/provider on app.state and a fixed clock."""
    app.state.store = store
    app.state.provider = fake_provider
    app.dependency_overrides[get_streak_tracker] = (
        lambda: StreakTracker(store, clock=clock)
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
