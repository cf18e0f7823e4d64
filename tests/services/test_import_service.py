"""Import Service — single and bulk import with counters, collections and streaks.

Tests cover:
    - import_one copies the post, records it, bumps import_count, finds/creates the collection
    - self import, re-import and inactive posts are rejected without writes
    - an import race lost at the unique constraint is AlreadyImported and writes nothing
    - N importers -> import_count == N
    - streak is recorded after commit; a streak failure is a warning, not a rollback
    - import_all batches, skips own/imported posts, flags only the earliest shared record
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy import update

from kondo.core.domain_types import ContentSource
from kondo.core.errors import (
    AlreadyImportedError,
    NotOwnerError,
    ResourceNotFoundError,
    SelfImportError,
)
from kondo.models.collection import Collection
from kondo.models.content_item import ContentItem
from kondo.models.import_record import ImportRecord
from kondo.models.published_post import PublishedPost
from kondo.models.streak_state import StreakState
from kondo.services.import_service import BulkImportOutcome, ImportOutcome


async def _published(sharing, seed, creator, title="travel", language=None, **artifacts):
    collection = await seed.collection(creator, title, language)
    item = await seed.item(creator, language=language, collections=[collection], **artifacts)
    return await sharing.publish(creator.id, item.id)


async def test_import_one_copies_post(sharing, imports, seed):
    ja = await seed.language("ja")
    creator = await seed.user(alias="creator", language=ja)
    reader = await seed.user(alias="reader", language=ja)
    post = await _published(sharing, seed, creator, language=ja, phonetic="<ruby>")

    outcome = await imports.import_one(reader.id, post.id)

    assert isinstance(outcome, ImportOutcome)
    assert outcome.was_collection_created is True
    assert outcome.collection_title == "travel"
    assert outcome.warnings == []

    item = await seed.get(ContentItem, outcome.item_id)
    assert item.user_id == reader.id
    assert item.source == ContentSource.IMPORTED.value
    assert item.origin_post_id == post.id
    assert item.phonetic == "<ruby>"
    assert [c.id for c in item.collections] == [outcome.collection_id]

    collection = await seed.get(Collection, outcome.collection_id)
    assert collection.user_id == reader.id
    assert collection.language_id == ja.id

    records = await seed.all(ImportRecord, ImportRecord.user_id == reader.id)
    assert len(records) == 1
    assert records[0].was_collection_created is True
    assert (await seed.get(PublishedPost, post.id)).import_count == 1


async def test_import_reuses_existing_collection_by_title(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    existing = await seed.collection(reader, "travel")
    post = await _published(sharing, seed, creator)

    outcome = await imports.import_one(reader.id, post.id)

    assert outcome.collection_id == existing.id
    assert outcome.was_collection_created is False


async def test_import_into_target_collection(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    target = await seed.collection(reader, "favourites")
    post = await _published(sharing, seed, creator)

    outcome = await imports.import_one(reader.id, post.id, target.id)

    assert outcome.collection_id == target.id
    assert outcome.was_collection_created is False


async def test_import_into_foreign_collection(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)
    foreign = await seed.collection(creator, "mine")

    result = await imports.import_one(reader.id, post.id, foreign.id)

    assert isinstance(result, NotOwnerError)
    assert await seed.all(ImportRecord) == []


async def test_self_import_is_rejected(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    post = await _published(sharing, seed, creator)

    result = await imports.import_one(creator.id, post.id)

    assert isinstance(result, SelfImportError)
    assert (await seed.get(PublishedPost, post.id)).import_count == 0


async def test_reimport_is_rejected(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)

    await imports.import_one(reader.id, post.id)
    second = await imports.import_one(reader.id, post.id)

    assert isinstance(second, AlreadyImportedError)
    assert (await seed.get(PublishedPost, post.id)).import_count == 1
    assert len(await seed.all(ContentItem, ContentItem.user_id == reader.id)) == 1


async def test_missing_post_is_not_found(imports, seed):
    reader = await seed.user(alias="reader")
    assert isinstance(await imports.import_one(reader.id, uuid4()), ResourceNotFoundError)


async def test_n_imports_count_n(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    post = await _published(sharing, seed, creator)

    for n in range(5):
        reader = await seed.user(alias=f"reader{n}")
        assert isinstance(await imports.import_one(reader.id, post.id), ImportOutcome)

    stored = await seed.get(PublishedPost, post.id)
    records = await seed.all(ImportRecord, ImportRecord.post_id == post.id)
    assert stored.import_count == 5 == len(records)


async def test_import_records_streak(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)

    outcome = await imports.import_one(reader.id, post.id, timezone_name="Asia/Tokyo")

    assert outcome.streak.current_streak == 1
    assert outcome.streak.is_new_streak is True
    assert (await seed.get(StreakState, reader.id)).current_streak == 1


async def test_streak_failure_keeps_import(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)

    outcome = await imports.import_one(reader.id, post.id, timezone_name="Not/AZone")

    assert isinstance(outcome, ImportOutcome)
    assert outcome.streak is None
    assert len(outcome.warnings) == 1
    assert (await seed.get(PublishedPost, post.id)).import_count == 1


async def test_streak_exception_becomes_warning(sharing, imports, seed, monkeypatch):
    from kondo.core.errors import PersistenceError

    async def broken(*args, **kwargs):
        raise PersistenceError("Connection or operational error", "execute")

    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)
    monkeypatch.setattr(imports.streaks, "record_activity", broken)

    outcome = await imports.import_one(reader.id, post.id)

    assert outcome.streak is None
    assert outcome.warnings
    assert len(await seed.all(ImportRecord)) == 1


# ─── import_all ──────────────────────────────────────────────────

async def test_import_all_imports_every_candidate(sharing, imports, seed):
    ja = await seed.language("ja")
    creator = await seed.user(alias="creator", language=ja)
    reader = await seed.user(alias="reader", language=ja)
    posts = [
        await _published(sharing, seed, creator, "food", ja) for _ in range(5)
    ]

    outcome = await imports.import_all(reader.id, "food")

    assert isinstance(outcome, BulkImportOutcome)
    assert outcome.imported_count == 5
    assert outcome.skipped_post_ids == []
    assert outcome.was_collection_created is True
    assert outcome.streak.current_streak == 1

    collections = await seed.all(Collection, Collection.user_id == reader.id)
    assert [c.title for c in collections] == ["food"]
    records = await seed.all(ImportRecord, ImportRecord.user_id == reader.id)
    assert len(records) == 5
    assert sum(r.was_collection_created for r in records) == 1
    for post in posts:
        assert (await seed.get(PublishedPost, post.id)).import_count == 1


async def test_import_all_skips_already_imported_and_own(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    first = await _published(sharing, seed, creator, "food")
    await _published(sharing, seed, creator, "food")
    await _published(sharing, seed, reader, "food")
    await imports.import_one(reader.id, first.id)

    outcome = await imports.import_all(reader.id, "food")

    assert outcome.imported_count == 1
    assert outcome.was_collection_created is False


async def test_import_all_unknown_label(imports, seed):
    reader = await seed.user(alias="reader")
    result = await imports.import_all(reader.id, "nothing here")
    assert isinstance(result, ResourceNotFoundError)


async def test_import_all_nothing_left(sharing, imports, seed):
    reader = await seed.user(alias="reader")
    await _published(sharing, seed, reader, "food")

    result = await imports.import_all(reader.id, "food")

    assert isinstance(result, AlreadyImportedError)


async def test_import_all_filters_by_user_language(sharing, imports, seed):
    ja = await seed.language("ja")
    ko = await seed.language("ko", "Korean")
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader", language=ko)
    await _published(sharing, seed, creator, "food", ja)
    korean = await _published(sharing, seed, creator, "food", ko)

    outcome = await imports.import_all(reader.id, "food")

    assert outcome.imported_count == 1
    records = await seed.all(ImportRecord, ImportRecord.user_id == reader.id)
    assert records[0].post_id == korean.id


async def test_concurrent_import_is_already_imported(sharing, imports, seed, monkeypatch):
    """The (user, post) unique constraint decides an import race the precheck missed."""
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    post = await _published(sharing, seed, creator)
    await imports.import_one(reader.id, post.id)

    async def stale_lookup(db, user_id, post_id):
        return None

    monkeypatch.setattr(imports, "_find_record", stale_lookup)
    second = await imports.import_one(reader.id, post.id)

    assert isinstance(second, AlreadyImportedError)
    assert (await seed.get(PublishedPost, post.id)).import_count == 1
    assert len(await seed.all(ContentItem, ContentItem.user_id == reader.id)) == 1
    assert len(await seed.all(ImportRecord, ImportRecord.user_id == reader.id)) == 1


async def test_import_all_flags_earliest_shared_post(sharing, imports, seed, store):
    ja = await seed.language("ja")
    creator = await seed.user(alias="creator", language=ja)
    reader = await seed.user(alias="reader", language=ja)
    posts = [
        await _published(sharing, seed, creator, "food", ja) for _ in range(3)
    ]
    # shared_at runs opposite to insertion order
    base = datetime(2026, 2, 1, tzinfo=timezone.utc)
    async with store.transaction() as db:
        for n, post in enumerate(posts):
            await db.execute(
                update(PublishedPost)
                .where(PublishedPost.id == post.id)
                .values(shared_at=base - timedelta(days=n))
            )

    await imports.import_all(reader.id, "food")

    flagged = await seed.all(
        ImportRecord,
        ImportRecord.user_id == reader.id,
        ImportRecord.was_collection_created.is_(True),
    )
    assert [r.post_id for r in flagged] == [posts[-1].id]
