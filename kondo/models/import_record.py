"""ImportRecord ORM — provenance of one user importing one published post.

Invariants:
    - UNIQUE (user_id, post_id): a user imports a post at most once
    - Deleted together with the imported item or the post (explicitly, same transaction)
    - was_collection_created: True only for the import that created the target collection

Design Decisions:
    - Unique constraint doubles as the concurrency guard for racing imports (mapped to AlreadyImported)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base


class ImportRecord(Base):
    """Import record entity — joins importer, post, imported copy and collection."""
    __tablename__ = "import_records"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_import_records_user_post"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("published_posts.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    imported_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    collection_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("collections.id", ondelete="SET NULL"), nullable=True,
    )
    was_collection_created: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
