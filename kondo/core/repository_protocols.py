"""Boundary Protocols — contracts between core services and infrastructure.

Invariants:
    - Services depend on these Protocols, never on concrete clients
    - Implementations are injected at construction (FastAPI lifespan, test fixtures)

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - transaction() yields a session already inside BEGIN; commit on clean exit,
      rollback + PersistenceError on failure
"""

from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from kondo.core.artifacts import Artifact
from kondo.core.generation_prompts import VoiceParams


class TransactionalStore(Protocol):
    """Relational store handle — implemented by DatabaseSessionManager."""
    def session(self) -> AbstractAsyncContextManager[AsyncSession]: ...
    def transaction(
        self, translate_integrity: bool = True,
    ) -> AbstractAsyncContextManager[AsyncSession]: ...


class GenerationProvider(Protocol):
    """Text completion + speech synthesis — no caching, no retries."""
    async def complete(self, prompt: str, system: str | None = None) -> str: ...
    async def synthesize_speech(
        self, text: str, voice: VoiceParams,
    ) -> tuple[bytes, str]: ...


ArtifactGenerator = Callable[[str], Awaitable[Artifact]]
