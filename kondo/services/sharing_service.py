"""Sharing Service — publish a content item as a community post, plus read-only sharing views.

Invariants:
    - All publish preconditions checked (enforce_sharing.validate_publish) before any write
    - Content and every artifact column copied verbatim into the post
    - Label = first non-reserved member-collection title (oldest first), else first title,
      else the default label
    - One transaction per publish; a unique violation on origin_item_id means a racing
      publisher won and is reported as AlreadySharedError

Design Decisions:
    - Business-rule failures returned as KondoError values, persistence failures raised
    - Stats computed with aggregate queries, not by loading rows
"""

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from kondo.config import Settings
from kondo.core.artifacts import copy_artifact_columns
from kondo.core.collection_label import resolve_post_label
from kondo.core.domain_types import ContentItemId, ContentSource, UserId
from kondo.core.enforce_sharing import validate_publish
from kondo.core.errors import AlreadySharedError, ErrorContext, KondoError
from kondo.core.repository_protocols import TransactionalStore
from kondo.models.collection import Collection, content_item_collections
from kondo.models.content_item import ContentItem
from kondo.models.published_post import PublishedPost
from kondo.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharingStatus:
    is_shared: bool
    post: PublishedPost | None = None


@dataclass(frozen=True)
class SharingStats:
    total_local: int
    total_imported: int
    total_shared: int
    total_imports_by_others: int


class SharingService:
    """Publish content items and report sharing state."""

    def __init__(self, store: TransactionalStore, settings: Settings):
        self.store = store
        self.reserved_titles = [t.lower() for t in settings.reserved_collection_titles]
        self.default_label = settings.default_post_label

    async def publish(
        self, user_id: UserId, item_id: ContentItemId,
    ) -> PublishedPost | KondoError:
        """Publish `item_id` on behalf of its owner."""
        try:
            async with self.store.transaction(translate_integrity=False) as db:
                user = await db.get(User, user_id)
                item = await db.get(ContentItem, item_id)
                existing = await self._find_post(db, item_id)

                error = validate_publish(user, item, existing, user_id, item_id)
                if error:
                    return error

                titles = await self._collection_titles(db, item_id)
                post = PublishedPost(
                    origin_item_id=item.id,
                    creator_id=user_id,
                    creator_alias=user.alias,
                    label=self._label(titles),
                    language_id=item.language_id,
                    content=item.content,
                    **copy_artifact_columns(item),
                )
                db.add(post)
                await db.flush()
        except IntegrityError:
            logger.warning(
                f"Concurrent publish of item {item_id}",
                extra={"user_id": str(user_id), "item_id": str(item_id)},
            )
            return AlreadySharedError(ErrorContext(
                user_id=str(user_id), resource_id=str(item_id),
            ))

        logger.info(
            f"Published item {item_id} as post {post.id}",
            extra={"user_id": str(user_id), "post_id": str(post.id)},
        )
        return post

    async def is_shared(self, item_id: ContentItemId) -> SharingStatus:
        async with self.store.session() as db:
            post = await self._find_post(db, item_id)
        return SharingStatus(is_shared=post is not None, post=post)

    async def sharing_stats(self, user_id: UserId) -> SharingStats:
        """Counts of the user's own, imported and shared items."""
        async with self.store.session() as db:
            by_source = dict((await db.execute(
                select(ContentItem.source, func.count())
                .where(ContentItem.user_id == user_id)
                .group_by(ContentItem.source)
            )).all())
            shared, imports = (await db.execute(
                select(
                    func.count(PublishedPost.id),
                    func.coalesce(func.sum(PublishedPost.import_count), 0),
                ).where(PublishedPost.creator_id == user_id)
            )).one()
        return SharingStats(
            total_local=by_source.get(ContentSource.LOCAL.value, 0),
            total_imported=by_source.get(ContentSource.IMPORTED.value, 0),
            total_shared=shared,
            total_imports_by_others=int(imports),
        )

    def _label(self, titles: list[str]) -> str:
        # Reserved titles compare case-insensitively; the label keeps the original case
        lowered = [t.lower() for t in titles]
        label = resolve_post_label(lowered, self.reserved_titles, self.default_label)
        if label in lowered:
            return titles[lowered.index(label)]
        return label

    async def _find_post(self, db, item_id: ContentItemId) -> PublishedPost | None:
        result = await db.execute(
            select(PublishedPost).where(PublishedPost.origin_item_id == item_id)
        )
        return result.scalar_one_or_none()

    async def _collection_titles(self, db, item_id: ContentItemId) -> list[str]:
        result = await db.execute(
            select(Collection.title)
            .join(
                content_item_collections,
                content_item_collections.c.collection_id == Collection.id,
            )
            .where(content_item_collections.c.content_item_id == item_id)
            .order_by(Collection.created_at)
        )
        return list(result.scalars().all())
