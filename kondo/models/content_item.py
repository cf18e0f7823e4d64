"""ContentItem ORM — a user-owned unit of translated content with cached artifacts.

Invariants:
    - Belongs to exactly one owner (user_id) and one language
    - source is "local" (user submission) or "imported" (copied from a published post)
    - origin_post_id set only for imported items; nulled if the post is unpublished
    - Member of zero or more collections via content_item_collections

Design Decisions:
    - origin_post_id FK uses use_alter: content_items <-> published_posts reference each other
    - Artifacts as flat columns (ArtifactColumnsMixin): single-variant UPDATE never touches siblings
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kondo.db.base import Base
from kondo.models.artifact_columns import ArtifactColumnsMixin
from kondo.models.collection import content_item_collections


class ContentItem(ArtifactColumnsMixin, Base):
    """Content item entity — translated text plus lazily generated artifacts."""
    __tablename__ = "content_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        index=True,
    )
    language_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("languages.id"), nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(
        String(20), nullable=False, default="local",
    )
    origin_post_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey(
            "published_posts.id", ondelete="SET NULL",
            use_alter=True, name="fk_content_items_origin_post_id",
        ),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    collections: Mapped[list["Collection"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "Collection", secondary=content_item_collections, lazy="selectin",
    )
