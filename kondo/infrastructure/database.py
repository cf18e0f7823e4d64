"""Database Session Manager — async connection pool with transactions, rollback, and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - transaction() commits on clean exit only; any failure rolls back the whole unit
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to PersistenceError (core/errors.py)

Design Decisions:
    - Instance owned by the FastAPI lifespan and injected into services
      (ADR: no process-wide singleton, no global import side effects)
    - expire_on_commit=False: returned ORM rows stay readable after commit in async context
    - IntegrityError re-raised untouched from transaction() when the caller asks for it
      (translate_integrity=False): services map unique violations to conflict errors
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from kondo.core.errors import PersistenceError

logger = logging.getLogger(__name__)


def _map_error(e: SQLAlchemyError) -> PersistenceError:
    """Map a SQLAlchemy failure to PersistenceError without leaking the statement."""
    if isinstance(e, IntegrityError):
        logger.error(f"DB integrity error: {e}")
        return PersistenceError("Integrity constraint violated", "commit")
    if isinstance(e, OperationalError):
        logger.error(f"DB operational error: {e}")
        return PersistenceError("Connection or operational error", "execute")
    if isinstance(e, DBAPIError):
        logger.error(f"DB driver error: {e}")
        return PersistenceError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {e}")
    return PersistenceError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception (reads, ad-hoc work)."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _map_error(e)
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(
        self, translate_integrity: bool = True,
    ) -> AsyncGenerator[AsyncSession, None]:
        """One atomic unit of work: BEGIN on entry, COMMIT on clean exit, ROLLBACK otherwise."""
        session = self._session_factory()
        try:
            async with session.begin():
                yield session
        except IntegrityError as e:
            if not translate_integrity:
                raise
            raise _map_error(e)
        except SQLAlchemyError as e:
            raise _map_error(e)
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close the pool (lifespan shutdown)."""
        await self.engine.dispose()
