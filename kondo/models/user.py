"""User ORM — the account fields the sharing core reads.

Invariants:
    - alias is unique when set
    - "has a public alias" == alias non-empty AND is_alias_public
    - language_id is the user's current learning language (nullable until chosen)

Design Decisions:
    - Auth/profile fields live with the auth provider; only what publish/import needs is mapped here
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base


class User(Base):
    """User entity — owner of content items, collections and streaks."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    alias: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True,
    )
    is_alias_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    language_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("languages.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
