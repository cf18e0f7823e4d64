"""Import Service — copies published posts into a user's library.

Invariants:
    - All import preconditions (enforce_sharing.validate_import) checked before any write
    - One transaction per single import: collection find-or-create, imported ContentItem
      (source=imported, artifacts copied), ImportRecord, import_count + 1, collection touch
    - import_count only ever changes via SQL expression (import_count = import_count + 1)
    - A unique violation on (user_id, post_id) means a racing import won -> AlreadyImportedError
    - The streak runs AFTER commit; its failure becomes a warning, never a rollback

Design Decisions:
    - Bulk import commits per batch (settings.import_batch_size): a failed batch rolls back
      alone and its posts are reported as skipped (ADR: bounded transaction size)
    - Target collection resolved once per bulk import; only the first imported item's
      record carries was_collection_created=True
    - Collection language = user's learning language, falling back to the post's language
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from kondo.config import Settings
from kondo.core.artifacts import copy_artifact_columns
from kondo.core.domain_types import (
    CollectionId,
    ContentItemId,
    ContentSource,
    PostId,
    UserId,
)
from kondo.core.enforce_sharing import check_target_collection, validate_import
from kondo.core.errors import (
    AlreadyImportedError,
    ErrorContext,
    KondoError,
    ResourceNotFoundError,
)
from kondo.core.repository_protocols import TransactionalStore
from kondo.core.streak_calendar import StreakTransition
from kondo.models.collection import Collection
from kondo.models.content_item import ContentItem
from kondo.models.import_record import ImportRecord
from kondo.models.published_post import PublishedPost
from kondo.models.user import User
from kondo.services.streak_tracker import StreakTracker

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    item_id: ContentItemId
    post_id: PostId
    collection_id: UUID
    collection_title: str
    was_collection_created: bool
    streak: StreakTransition | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class BulkImportOutcome:
    label: str
    collection_id: UUID | None
    collection_title: str | None
    was_collection_created: bool
    imported_item_ids: list[UUID] = field(default_factory=list)
    skipped_post_ids: list[UUID] = field(default_factory=list)
    streak: StreakTransition | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported_item_ids)


class ImportService:
    """Single and bulk import of published posts."""

    def __init__(
        self, store: TransactionalStore, streaks: StreakTracker, settings: Settings,
    ):
        self.store = store
        self.streaks = streaks
        self.batch_size = max(1, settings.import_batch_size)

    async def import_one(
        self,
        user_id: UserId,
        post_id: PostId,
        target_collection_id: CollectionId | None = None,
        timezone_name: str | None = None,
    ) -> ImportOutcome | KondoError:
        """Import one post into the user's library."""
        try:
            async with self.store.transaction(translate_integrity=False) as db:
                post = await db.get(PublishedPost, post_id)
                existing = await self._find_record(db, user_id, post_id)
                collection = (
                    await db.get(Collection, target_collection_id)
                    if target_collection_id else None
                )
                error = validate_import(
                    post, existing, collection, post_id,
                    target_collection_id, user_id,
                )
                if error:
                    return error
                user = await db.get(User, user_id)
                if user is None:
                    return ResourceNotFoundError("User", str(user_id))

                collection, created = await self._resolve_collection(
                    db, user_id, post.label,
                    user.language_id or post.language_id, collection,
                )
                item = await self._copy_post(db, user_id, post, collection, created)
        except IntegrityError:
            logger.warning(
                f"Concurrent import of post {post_id}",
                extra={"user_id": str(user_id), "post_id": str(post_id)},
            )
            return AlreadyImportedError(ErrorContext(
                user_id=str(user_id), resource_id=str(post_id),
            ))

        logger.info(
            f"Imported post {post_id} as item {item.id}",
            extra={
                "user_id": str(user_id), "post_id": str(post_id),
                "collection_id": str(collection.id),
            },
        )
        outcome = ImportOutcome(
            item_id=item.id,
            post_id=post_id,
            collection_id=collection.id,
            collection_title=collection.title,
            was_collection_created=created,
        )
        outcome.streak = await self._record_streak(
            user_id, timezone_name, outcome.warnings,
        )
        return outcome

    async def import_all(
        self,
        user_id: UserId,
        label: str,
        target_collection_id: CollectionId | None = None,
        timezone_name: str | None = None,
    ) -> BulkImportOutcome | KondoError:
        """Import every not-yet-imported post filed under `label`."""
        async with self.store.session() as db:
            user = await db.get(User, user_id)
            if user is None:
                return ResourceNotFoundError("User", str(user_id))
            if target_collection_id:
                error = check_target_collection(
                    await db.get(Collection, target_collection_id),
                    target_collection_id, user_id,
                )
                if error:
                    return error
            candidates = await self._label_posts(db, label, user.language_id)
            if not candidates:
                return ResourceNotFoundError("Posts labelled", label)
            language_id = user.language_id or candidates[0].language_id
            imported = set(await self._imported_post_ids(
                db, user_id, [p.id for p in candidates],
            ))

        post_ids = [
            p.id for p in candidates
            if p.creator_id != user_id and p.id not in imported
        ]
        if not post_ids:
            return AlreadyImportedError(ErrorContext(
                user_id=str(user_id), debug_info={"label": label},
            ))

        outcome = BulkImportOutcome(
            label=label,
            collection_id=target_collection_id,
            collection_title=None,
            was_collection_created=False,
        )
        for start in range(0, len(post_ids), self.batch_size):
            batch = post_ids[start:start + self.batch_size]
            await self._import_batch(
                user_id, label, language_id, batch, outcome,
            )

        if outcome.imported_count:
            outcome.streak = await self._record_streak(
                user_id, timezone_name, outcome.warnings,
            )
        logger.info(
            f"Bulk import of '{label}': {outcome.imported_count} imported, "
            f"{len(outcome.skipped_post_ids)} skipped",
            extra={"user_id": str(user_id), "imported": outcome.imported_count},
        )
        return outcome

    async def _import_batch(
        self,
        user_id: UserId,
        label: str,
        language_id: UUID | None,
        batch: list[UUID],
        outcome: BulkImportOutcome,
    ) -> None:
        """Import one batch in its own transaction; on conflict the batch is skipped."""
        imported_ids: list[UUID] = []
        try:
            async with self.store.transaction(translate_integrity=False) as db:
                given = (
                    await db.get(Collection, outcome.collection_id)
                    if outcome.collection_id else None
                )
                collection, created = await self._resolve_collection(
                    db, user_id, label, language_id, given,
                )
                already = set(await self._imported_post_ids(db, user_id, batch))
                posts = (await db.execute(
                    select(PublishedPost).where(
                        PublishedPost.id.in_(batch),
                        PublishedPost.is_active.is_(True),
                    ).order_by(PublishedPost.shared_at)
                )).scalars().all()
                for post in posts:
                    if post.id in already:
                        continue
                    item = await self._copy_post(
                        db, user_id, post, collection,
                        created and not imported_ids,
                    )
                    imported_ids.append(item.id)
        except IntegrityError:
            logger.warning(
                f"Bulk import batch of {len(batch)} rolled back on conflict",
                extra={"user_id": str(user_id), "batch": len(batch)},
            )
            outcome.skipped_post_ids.extend(batch)
            outcome.warnings.append(
                f"{len(batch)} posts were skipped because they were imported concurrently",
            )
            return

        outcome.collection_id = collection.id
        outcome.collection_title = collection.title
        outcome.was_collection_created = outcome.was_collection_created or created
        outcome.imported_item_ids.extend(imported_ids)
        loaded = {post.id for post in posts}
        outcome.skipped_post_ids.extend(
            pid for pid in batch if pid not in loaded or pid in already
        )

    async def _copy_post(
        self, db, user_id: UserId, post: PublishedPost, collection: Collection,
        was_collection_created: bool,
    ) -> ContentItem:
        """Create the imported item, its record, and bump the post counter."""
        now = datetime.now(timezone.utc)
        item = ContentItem(
            user_id=user_id,
            language_id=post.language_id,
            content=post.content,
            source=ContentSource.IMPORTED.value,
            origin_post_id=post.id,
            collections=[collection],
            **copy_artifact_columns(post),
        )
        db.add(item)
        await db.flush()

        db.add(ImportRecord(
            user_id=user_id,
            post_id=post.id,
            imported_item_id=item.id,
            collection_id=collection.id,
            was_collection_created=was_collection_created,
        ))
        await db.flush()

        await db.execute(
            update(PublishedPost)
            .where(PublishedPost.id == post.id)
            .values(import_count=PublishedPost.import_count + 1)
            .execution_options(synchronize_session=False)
        )
        collection.updated_at = now
        return item

    async def _resolve_collection(
        self, db, user_id: UserId, title: str, language_id: UUID | None,
        given: Collection | None,
    ) -> tuple[Collection, bool]:
        """Given collection, else oldest (user, title, language) match, else a new one."""
        if given is not None:
            return given, False
        result = await db.execute(
            select(Collection)
            .where(
                Collection.user_id == user_id,
                Collection.title == title,
                Collection.language_id == language_id,
            )
            .order_by(Collection.created_at)
            .limit(1)
        )
        collection = result.scalar_one_or_none()
        if collection is not None:
            return collection, False
        collection = Collection(user_id=user_id, title=title, language_id=language_id)
        db.add(collection)
        await db.flush()
        return collection, True

    async def _record_streak(
        self, user_id: UserId, timezone_name: str | None, warnings: list[str],
    ) -> StreakTransition | None:
        """Post-commit streak update; failures become warnings."""
        try:
            result = await self.streaks.record_activity(user_id, timezone_name)
        except KondoError as e:
            logger.error(
                f"Streak update failed after import: {e.message}",
                extra={"user_id": str(user_id), "error_code": e.code},
            )
            warnings.append("Your import succeeded but the streak could not be updated")
            return None
        if isinstance(result, KondoError):
            logger.warning(
                f"Streak not recorded: {result.message}",
                extra={"user_id": str(user_id), "error_code": result.code},
            )
            warnings.append(result.message)
            return None
        return result

    async def _find_record(
        self, db, user_id: UserId, post_id: PostId,
    ) -> ImportRecord | None:
        result = await db.execute(
            select(ImportRecord).where(
                ImportRecord.user_id == user_id,
                ImportRecord.post_id == post_id,
            )
        )
        return result.scalar_one_or_none()

    async def _imported_post_ids(
        self, db, user_id: UserId, post_ids: list[UUID],
    ) -> list[UUID]:
        result = await db.execute(
            select(ImportRecord.post_id).where(
                ImportRecord.user_id == user_id,
                ImportRecord.post_id.in_(post_ids),
            )
        )
        return list(result.scalars().all())

    async def _label_posts(
        self, db, label: str, language_id: UUID | None,
    ) -> list[PublishedPost]:
        query = select(PublishedPost).where(
            PublishedPost.label == label,
            PublishedPost.is_active.is_(True),
        )
        if language_id is not None:
            query = query.where(PublishedPost.language_id == language_id)
        result = await db.execute(query.order_by(PublishedPost.shared_at))
        return list(result.scalars().all())
