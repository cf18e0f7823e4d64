"""API Dependencies — store, provider, current user and service wiring for routes.

Invariants:
    - Store and provider are read from app.state (set by the lifespan), never imported globals
    - Current user comes from the X-User-Id header set by the upstream auth proxy
    - unwrap() turns a returned KondoError into a raised one for the global handler

Design Decisions:
    - Services built per request: they hold no state beyond injected handles
    - Tests override get_store/get_provider/get_streak_tracker via dependency_overrides
"""

from typing import TypeVar
from uuid import UUID

from fastapi import Depends, Header, Request

from kondo.config import Settings, get_settings
from kondo.core.errors import KondoError
from kondo.core.repository_protocols import GenerationProvider, TransactionalStore
from kondo.services.artifact_generators import ArtifactGenerators
from kondo.services.cascade_deletion import CascadeDeletionService
from kondo.services.derivation_cache import DerivationCache
from kondo.services.import_service import ImportService
from kondo.services.sharing_service import SharingService
from kondo.services.streak_tracker import StreakTracker

T = TypeVar("T")


def get_store(request: Request) -> TransactionalStore:
    return request.app.state.store


def get_provider(request: Request) -> GenerationProvider:
    return request.app.state.provider


async def get_current_user_id(x_user_id: UUID = Header(...)) -> UUID:
    """Authenticated user id forwarded by the auth proxy."""
    return x_user_id


def get_streak_tracker(
    store: TransactionalStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> StreakTracker:
    return StreakTracker(store, default_timezone=settings.default_timezone)


def get_sharing_service(
    store: TransactionalStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SharingService:
    return SharingService(store, settings)


def get_import_service(
    store: TransactionalStore = Depends(get_store),
    streaks: StreakTracker = Depends(get_streak_tracker),
    settings: Settings = Depends(get_settings),
) -> ImportService:
    return ImportService(store, streaks, settings)


def get_deletion_service(
    store: TransactionalStore = Depends(get_store),
) -> CascadeDeletionService:
    return CascadeDeletionService(store)


def get_derivation_cache(
    store: TransactionalStore = Depends(get_store),
    provider: GenerationProvider = Depends(get_provider),
) -> DerivationCache:
    return DerivationCache(store, ArtifactGenerators(provider))


def unwrap(result: T | KondoError) -> T:
    """Raise a returned domain error; pass successes through."""
    if isinstance(result, KondoError):
        raise result
    return result
