"""Cascade Deletion Service — deletes content items and posts without leaving dangling state.

Invariants:
    - Ownership verified before any write (enforce_sharing.validate_delete)
    - Steps come from core/cascade_plan.plan_deletion and execute in order, in ONE transaction
    - ImportRecords and collection memberships deleted explicitly; FK cascades are not relied on
    - Published item: importers' copies and records go first, then the post, then the item
    - A copy that was republished is cascaded the same way before it is deleted
    - Imported item: its record is deleted and the origin post's import_count drops by exactly 1
    - Every collection that loses a member (plus caller-supplied ones the user owns) is touched
    - Any failure rolls the whole deletion back (PersistenceError raised)

Design Decisions:
    - Core DELETE/UPDATE statements over session.delete(): one statement per step,
      no ORM cascade surprises (ADR: explicit cascade order)
    - unpublish detaches imported copies (origin_post_id = NULL) instead of deleting them:
      importers keep what they imported
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, func, select, update

from kondo.core.cascade_plan import DeletionImpact, plan_deletion
from kondo.core.domain_types import (
    CascadeStep,
    CollectionId,
    ContentItemId,
    ContentSource,
    PostId,
    UserId,
)
from kondo.core.enforce_sharing import check_exists, check_owner, validate_delete
from kondo.core.errors import KondoError, ResourceNotFoundError
from kondo.core.repository_protocols import TransactionalStore
from kondo.models.collection import Collection, content_item_collections
from kondo.models.content_item import ContentItem
from kondo.models.import_record import ImportRecord
from kondo.models.published_post import PublishedPost

logger = logging.getLogger(__name__)

_memberships = content_item_collections.c


@dataclass
class DeletionOutcome:
    """What a deletion removed."""
    steps: list[CascadeStep] = field(default_factory=list)
    deleted_item_ids: list[UUID] = field(default_factory=list)
    deleted_post_id: UUID | None = None
    cascaded_post_ids: list[UUID] = field(default_factory=list)
    deleted_import_records: int = 0
    detached_item_ids: list[UUID] = field(default_factory=list)
    touched_collection_ids: list[UUID] = field(default_factory=list)


class CascadeDeletionService:
    """Impact reports and cascading deletes for content items and posts."""

    def __init__(self, store: TransactionalStore):
        self.store = store

    async def check_impact(
        self, user_id: UserId, item_id: ContentItemId,
    ) -> DeletionImpact | KondoError:
        """Read-only report of what deleting `item_id` would affect."""
        async with self.store.session() as db:
            item = await db.get(ContentItem, item_id)
            if item is None:
                return ResourceNotFoundError("ContentItem", str(item_id))
            impact, _ = await self._impact(db, item, user_id)
        return impact

    async def delete_with_cascade(
        self,
        user_id: UserId,
        item_id: ContentItemId,
        collection_ids: list[CollectionId] | None = None,
    ) -> DeletionOutcome | KondoError:
        """Delete an owned content item and everything hanging off it."""
        async with self.store.transaction() as db:
            item = await db.get(ContentItem, item_id)
            error = validate_delete(item, item_id, user_id)
            if error:
                return error

            impact, post = await self._impact(db, item, user_id)
            outcome = DeletionOutcome()
            for step in plan_deletion(impact):
                await self._run_step(db, step, item, post, user_id, collection_ids, outcome)
                outcome.steps.append(step)

        logger.info(
            f"Deleted item {item_id} ({len(outcome.deleted_item_ids)} items, "
            f"{outcome.deleted_import_records} import records)",
            extra={"user_id": str(user_id), "item_id": str(item_id)},
        )
        return outcome

    async def unpublish(
        self, user_id: UserId, post_id: PostId,
    ) -> DeletionOutcome | KondoError:
        """Remove a published post; the origin item and imported copies stay."""
        async with self.store.transaction() as db:
            post = await db.get(PublishedPost, post_id)
            error = (
                check_exists(post, "PublishedPost", post_id)
                or check_owner(post.creator_id, user_id, "posts")
            )
            if error:
                return error

            outcome = DeletionOutcome(deleted_post_id=post_id)
            result = await db.execute(
                delete(ImportRecord).where(ImportRecord.post_id == post_id)
            )
            outcome.deleted_import_records = result.rowcount
            outcome.detached_item_ids = await self._detach_copies(db, post_id)
            await db.execute(
                delete(PublishedPost).where(PublishedPost.id == post_id)
            )

        logger.info(
            f"Unpublished post {post_id}",
            extra={"user_id": str(user_id), "post_id": str(post_id)},
        )
        return outcome

    # ─── Steps ──────────────────────────────────────────────────────

    async def _run_step(
        self,
        db,
        step: CascadeStep,
        item: ContentItem,
        post: PublishedPost | None,
        user_id: UserId,
        collection_ids: list[CollectionId] | None,
        outcome: DeletionOutcome,
    ) -> None:
        if step == CascadeStep.DELETE_CHILDREN:
            await self._delete_children(db, post.id, outcome)
        elif step == CascadeStep.DELETE_POST:
            await self._delete_post(db, post.id)
            outcome.deleted_post_id = post.id
        elif step == CascadeStep.RELEASE_IMPORT:
            await self._release_import(db, item, outcome)
        elif step == CascadeStep.DELETE_PARENT:
            await self._delete_parent(db, item, user_id, collection_ids, outcome)

    async def _delete_children(
        self, db, post_id: PostId, outcome: DeletionOutcome,
    ) -> None:
        """Importers' records and copies of a post that is going away.

        A copy that was itself published takes its own post (and that post's
        copies) with it, children first at every level.
        """
        child_ids = list((await db.execute(
            select(ImportRecord.imported_item_id).where(ImportRecord.post_id == post_id)
        )).scalars().all())
        result = await db.execute(
            delete(ImportRecord).where(ImportRecord.post_id == post_id)
        )
        outcome.deleted_import_records += result.rowcount
        if not child_ids:
            return

        republished = (await db.execute(
            select(PublishedPost.id).where(PublishedPost.origin_item_id.in_(child_ids))
        )).scalars().all()
        for child_post_id in republished:
            await self._delete_children(db, child_post_id, outcome)
            await self._delete_post(db, child_post_id)
            outcome.cascaded_post_ids.append(child_post_id)

        touched = await self._member_collections(db, child_ids)
        await db.execute(
            delete(content_item_collections)
            .where(_memberships.content_item_id.in_(child_ids))
        )
        await db.execute(
            delete(ContentItem)
            .where(ContentItem.id.in_(child_ids))
            .execution_options(synchronize_session=False)
        )
        await self._touch(db, touched, outcome)
        outcome.deleted_item_ids.extend(child_ids)

    async def _delete_post(self, db, post_id: PostId) -> None:
        await self._detach_copies(db, post_id)
        await db.execute(
            delete(PublishedPost)
            .where(PublishedPost.id == post_id)
            .execution_options(synchronize_session=False)
        )

    async def _release_import(
        self, db, item: ContentItem, outcome: DeletionOutcome,
    ) -> None:
        """Drop the item's import record and give back its count on the origin post."""
        result = await db.execute(
            delete(ImportRecord).where(ImportRecord.imported_item_id == item.id)
        )
        outcome.deleted_import_records += result.rowcount
        if result.rowcount and item.origin_post_id is not None:
            await db.execute(
                update(PublishedPost)
                .where(
                    PublishedPost.id == item.origin_post_id,
                    PublishedPost.import_count > 0,
                )
                .values(import_count=PublishedPost.import_count - 1)
                .execution_options(synchronize_session=False)
            )

    async def _delete_parent(
        self,
        db,
        item: ContentItem,
        user_id: UserId,
        collection_ids: list[CollectionId] | None,
        outcome: DeletionOutcome,
    ) -> None:
        touched = set(await self._member_collections(db, [item.id]))
        if collection_ids:
            owned = (await db.execute(
                select(Collection.id).where(
                    Collection.id.in_(collection_ids),
                    Collection.user_id == user_id,
                )
            )).scalars().all()
            touched.update(owned)

        await db.execute(
            delete(content_item_collections)
            .where(_memberships.content_item_id == item.id)
        )
        await db.execute(
            delete(ContentItem)
            .where(ContentItem.id == item.id)
            .execution_options(synchronize_session=False)
        )
        await self._touch(db, list(touched), outcome)
        outcome.deleted_item_ids.append(item.id)

    # ─── Helpers ────────────────────────────────────────────────────

    async def _impact(
        self, db, item: ContentItem, user_id: UserId,
    ) -> tuple[DeletionImpact, PublishedPost | None]:
        post = (await db.execute(
            select(PublishedPost).where(PublishedPost.origin_item_id == item.id)
        )).scalar_one_or_none()
        importer_count = 0
        if post is not None:
            importer_count = (await db.execute(
                select(func.count(func.distinct(ImportRecord.user_id)))
                .where(ImportRecord.post_id == post.id)
            )).scalar_one()
        impact = DeletionImpact(
            can_delete=item.user_id == user_id,
            is_published=post is not None,
            import_count=post.import_count if post else 0,
            importer_count=importer_count,
            is_imported=(
                item.source == ContentSource.IMPORTED.value
                and item.origin_post_id is not None
            ),
        )
        return impact, post

    async def _detach_copies(self, db, post_id: PostId) -> list[UUID]:
        """Clear origin_post_id on every surviving copy of the post."""
        copy_ids = list((await db.execute(
            select(ContentItem.id).where(ContentItem.origin_post_id == post_id)
        )).scalars().all())
        if copy_ids:
            await db.execute(
                update(ContentItem)
                .where(ContentItem.id.in_(copy_ids))
                .values(origin_post_id=None)
                .execution_options(synchronize_session=False)
            )
        return copy_ids

    async def _member_collections(self, db, item_ids: list[UUID]) -> list[UUID]:
        result = await db.execute(
            select(_memberships.collection_id)
            .where(_memberships.content_item_id.in_(item_ids))
            .distinct()
        )
        return list(result.scalars().all())

    async def _touch(
        self, db, collection_ids: list[UUID], outcome: DeletionOutcome,
    ) -> None:
        if not collection_ids:
            return
        await db.execute(
            update(Collection)
            .where(Collection.id.in_(collection_ids))
            .values(updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        outcome.touched_collection_ids.extend(
            cid for cid in collection_ids if cid not in outcome.touched_collection_ids
        )
