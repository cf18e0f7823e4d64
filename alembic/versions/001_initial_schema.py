"""Initial schema — users, languages, collections, content items, posts, imports, streaks.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _artifact_columns() -> list[sa.Column]:
    return [
        sa.Column("breakdown_desktop", sa.Text, nullable=True),
        sa.Column("breakdown_mobile", sa.Text, nullable=True),
        sa.Column("phonetic", sa.Text, nullable=True),
        sa.Column("audio", sa.LargeBinary, nullable=True),
        sa.Column("audio_mime_type", sa.String(100), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "languages",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("code", sa.String(10), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("alias", sa.String(20), nullable=True, unique=True),
        sa.Column("is_alias_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("language_id", sa.Uuid, sa.ForeignKey("languages.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("language_id", sa.Uuid, sa.ForeignKey("languages.id"), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_collections_user_language_title", "collections",
        ["user_id", "language_id", "title"],
    )

    # origin_post_id FK added after published_posts exists (circular reference)
    op.create_table(
        "content_items",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("language_id", sa.Uuid, sa.ForeignKey("languages.id"), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="local"),
        sa.Column("origin_post_id", sa.Uuid, nullable=True),
        *_artifact_columns(),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_content_items_user_id", "content_items", ["user_id"])
    op.create_index("ix_content_items_origin_post_id", "content_items", ["origin_post_id"])

    op.create_table(
        "content_item_collections",
        sa.Column("content_item_id", sa.Uuid, sa.ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("collection_id", sa.Uuid, sa.ForeignKey("collections.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "published_posts",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("origin_item_id", sa.Uuid, sa.ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("creator_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("creator_alias", sa.String(20), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("language_id", sa.Uuid, sa.ForeignKey("languages.id"), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        *_artifact_columns(),
        sa.Column("import_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("shared_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_published_posts_creator_id", "published_posts", ["creator_id"])
    op.create_index("ix_published_posts_label", "published_posts", ["label"])

    op.create_foreign_key(
        "fk_content_items_origin_post_id", "content_items", "published_posts",
        ["origin_post_id"], ["id"], ondelete="SET NULL",
    )

    op.create_table(
        "import_records",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("post_id", sa.Uuid, sa.ForeignKey("published_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("imported_item_id", sa.Uuid, sa.ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("collection_id", sa.Uuid, sa.ForeignKey("collections.id", ondelete="SET NULL"), nullable=True),
        sa.Column("was_collection_created", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("imported_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "post_id", name="uq_import_records_user_post"),
    )
    op.create_index("ix_import_records_post_id", "import_records", ["post_id"])

    op.create_table(
        "streak_states",
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("current_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("streak_states")
    op.drop_table("import_records")
    op.drop_constraint("fk_content_items_origin_post_id", "content_items", type_="foreignkey")
    op.drop_table("published_posts")
    op.drop_table("content_item_collections")
    op.drop_table("content_items")
    op.drop_table("collections")
    op.drop_table("users")
    op.drop_table("languages")
