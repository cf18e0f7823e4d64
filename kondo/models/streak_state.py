"""StreakState ORM — per-user daily activity streak counters.

Invariants:
    - One row per user (user_id is the primary key), created lazily on first read/activity
    - Mutated only by StreakTracker; never deleted by the core
    - last_activity_date is an instant; its LOCAL day (caller's timezone) is what counts
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base


class StreakState(Base):
    """Streak entity — current/max streak and last qualifying activity."""
    __tablename__ = "streak_states"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    )
    current_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    max_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    last_activity_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
