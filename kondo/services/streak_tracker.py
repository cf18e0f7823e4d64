"""Streak Tracker — records qualifying daily activity against the user's local calendar.

Invariants:
    - At most one streak increment per user per LOCAL day (same-day calls are no-ops)
    - Transition computed by core/streak_calendar.advance_streak (pure); this shell only
      loads, persists and supplies the clock
    - Row created lazily on first read or activity, never deleted; a lost insert
      race counts as "row exists", so concurrent first activities stay idempotent
    - Unknown timezone name -> ValidationError returned; missing -> configured default

Design Decisions:
    - Clock injected (callable returning aware UTC datetime): tests pin "now" without patching
    - Row read with FOR UPDATE where the backend supports it: concurrent same-day calls
      serialize on the row instead of double-incrementing
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from kondo.core.domain_types import DEFAULT_TIMEZONE, UserId
from kondo.core.errors import KondoError, ResourceNotFoundError, ValidationError
from kondo.core.repository_protocols import TransactionalStore
from kondo.core.streak_calendar import (
    StreakSnapshot,
    StreakTransition,
    advance_streak,
    as_utc,
    load_timezone,
)
from kondo.models.streak_state import StreakState

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StreakTracker:
    """Daily activity streaks."""

    def __init__(
        self,
        store: TransactionalStore,
        default_timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.default_timezone = default_timezone
        self.clock = clock

    async def record_activity(
        self, user_id: UserId, timezone_name: str | None = None,
    ) -> StreakTransition | KondoError:
        """Count one activity now; returns the resulting streak state."""
        name = timezone_name or self.default_timezone
        tz = load_timezone(name)
        if tz is None:
            return ValidationError(f"Unknown timezone '{name}'", "timezone")

        now = self.clock()
        await self._ensure_row(user_id)
        async with self.store.transaction() as db:
            state = (await db.execute(
                select(StreakState)
                .where(StreakState.user_id == user_id)
                .with_for_update()
            )).scalar_one_or_none()
            if state is None:
                return ResourceNotFoundError("User", str(user_id))
            transition = advance_streak(_snapshot(state), now, tz)
            if transition.changed:
                state.current_streak = transition.current_streak
                state.max_streak = transition.max_streak
                state.last_activity_date = transition.last_activity_date
                state.updated_at = as_utc(now)

        if transition.changed:
            logger.info(
                f"Streak advanced to {transition.current_streak}",
                extra={
                    "user_id": str(user_id),
                    "current_streak": transition.current_streak,
                },
            )
        return transition

    async def get_streak(self, user_id: UserId) -> StreakSnapshot:
        """Current and max streak (creates the row on first read)."""
        await self._ensure_row(user_id)
        async with self.store.session() as db:
            state = await db.get(StreakState, user_id)
        return _snapshot(state) if state else StreakSnapshot()

    async def _ensure_row(self, user_id: UserId) -> None:
        """Create the user's row in its own transaction; a concurrent creator may win."""
        if await self._row_exists(user_id):
            return
        try:
            async with self.store.transaction(translate_integrity=False) as db:
                db.add(StreakState(user_id=user_id, current_streak=0, max_streak=0))
        except IntegrityError:
            logger.info(
                "Streak row created concurrently",
                extra={"user_id": str(user_id)},
            )

    async def _row_exists(self, user_id: UserId) -> bool:
        async with self.store.session() as db:
            return await db.get(StreakState, user_id) is not None


def _snapshot(state: StreakState) -> StreakSnapshot:
    return StreakSnapshot(
        current_streak=state.current_streak,
        max_streak=state.max_streak,
        last_activity_date=(
            as_utc(state.last_activity_date) if state.last_activity_date else None
        ),
    )
