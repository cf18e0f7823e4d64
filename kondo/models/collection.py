"""Collection ORM — a user's named, language-scoped grouping of content items ("bookmark").

Invariants:
    - Scoped by (user_id, language_id); title lookup for import is per scope
    - updated_at is touched whenever membership changes (import, delete)
    - Membership lives in content_item_collections (many-to-many)

Design Decisions:
    - No unique constraint on (user, language, title): legacy data has duplicates;
      import find-or-create takes the oldest match
    - Association rows cascade at the DB level but are also deleted explicitly by
      the deletion service (ADR: explicit cascade order)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base


content_item_collections = Table(
    "content_item_collections",
    Base.metadata,
    Column(
        "content_item_id", Uuid,
        ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "collection_id", Uuid,
        ForeignKey("collections.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Collection(Base):
    """Collection entity — groups content items for one user and language."""
    __tablename__ = "collections"
    __table_args__ = (
        Index("ix_collections_user_language_title", "user_id", "language_id", "title"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    language_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("languages.id"), nullable=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
