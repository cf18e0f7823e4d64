"""PublishedPost ORM — the single public copy of one content item.

Invariants:
    - origin_item_id is UNIQUE: at most one post per content item
    - Content and artifacts copied verbatim at publish time (no regeneration)
    - import_count == number of ImportRecords for this post, maintained only via
      SQL-expression increment/decrement in the same transaction as the record write
    - label and creator_alias are denormalized snapshots taken at publish time

Design Decisions:
    - Unique constraint is the concurrency guard for racing publishers (mapped to AlreadyShared)
    - Own artifact columns: the community copy caches its own generated variants
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base
from kondo.models.artifact_columns import ArtifactColumnsMixin


class PublishedPost(ArtifactColumnsMixin, Base):
    """Published post entity — public, importable copy of a content item."""
    __tablename__ = "published_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    origin_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        index=True,
    )
    creator_alias: Mapped[str] = mapped_column(String(20), nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    language_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("languages.id"), nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    import_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    shared_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
