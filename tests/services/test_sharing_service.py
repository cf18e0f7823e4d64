"""Sharing Service — publish, sharing status and stats against a real (SQLite) store.

Tests cover:
    - publish copies content and every artifact into the post
    - label precedence over reserved collection titles
    - publish preconditions (alias, owner, already shared) write nothing
    - a publish race lost at the unique constraint is AlreadyShared
    - is_shared and sharing_stats views
"""

from uuid import uuid4

from kondo.core.errors import (
    AlreadySharedError,
    NoPublicAliasError,
    NotOwnerError,
    ResourceNotFoundError,
)
from kondo.models.published_post import PublishedPost


async def test_publish_copies_content_and_artifacts(sharing, seed):
    ja = await seed.language("ja")
    user = await seed.user(alias="kana", language=ja)
    item = await seed.item(
        user, language=ja, breakdown_desktop="table", phonetic="<ruby>",
        audio=b"mp3", audio_mime_type="audio/mpeg",
    )

    post = await sharing.publish(user.id, item.id)

    assert isinstance(post, PublishedPost)
    stored = await seed.get(PublishedPost, post.id)
    assert stored.origin_item_id == item.id
    assert stored.creator_alias == "kana"
    assert stored.content == item.content
    assert stored.language_id == ja.id
    assert stored.breakdown_desktop == "table"
    assert stored.breakdown_mobile is None
    assert stored.phonetic == "<ruby>"
    assert stored.audio == b"mp3"
    assert stored.import_count == 0
    assert stored.is_active is True


async def test_label_skips_reserved_titles(sharing, seed):
    user = await seed.user(alias="kana")
    reserved = await seed.collection(user, "Daily Summary")
    travel = await seed.collection(user, "travel")
    item = await seed.item(user, collections=[reserved, travel])

    post = await sharing.publish(user.id, item.id)

    assert post.label == "travel"


async def test_label_falls_back_to_first_reserved_title(sharing, seed):
    user = await seed.user(alias="kana")
    search = await seed.collection(user, "search")
    item = await seed.item(user, collections=[search])

    post = await sharing.publish(user.id, item.id)

    assert post.label == "search"


async def test_label_defaults_to_untitled(sharing, seed):
    user = await seed.user(alias="kana")
    item = await seed.item(user)

    post = await sharing.publish(user.id, item.id)

    assert post.label == "Untitled"


async def test_publish_twice_is_already_shared(sharing, seed):
    user = await seed.user(alias="kana")
    item = await seed.item(user)

    first = await sharing.publish(user.id, item.id)
    second = await sharing.publish(user.id, item.id)

    assert isinstance(first, PublishedPost)
    assert isinstance(second, AlreadySharedError)
    assert len(await seed.all(PublishedPost)) == 1


async def test_publish_requires_public_alias(sharing, seed):
    user = await seed.user(alias="kana", public=False)
    item = await seed.item(user)

    result = await sharing.publish(user.id, item.id)

    assert isinstance(result, NoPublicAliasError)
    assert await seed.all(PublishedPost) == []


async def test_publish_foreign_item_is_not_owner(sharing, seed):
    owner = await seed.user(alias="owner")
    other = await seed.user(alias="other")
    item = await seed.item(owner)

    assert isinstance(await sharing.publish(other.id, item.id), NotOwnerError)


async def test_publish_missing_item(sharing, seed):
    user = await seed.user(alias="kana")
    assert isinstance(await sharing.publish(user.id, uuid4()), ResourceNotFoundError)


async def test_is_shared(sharing, seed):
    user = await seed.user(alias="kana")
    item = await seed.item(user)

    assert (await sharing.is_shared(item.id)).is_shared is False
    post = await sharing.publish(user.id, item.id)
    status = await sharing.is_shared(item.id)
    assert status.is_shared is True
    assert status.post.id == post.id


async def test_sharing_stats(sharing, imports, seed):
    creator = await seed.user(alias="creator")
    reader = await seed.user(alias="reader")
    first = await seed.item(creator)
    await seed.item(creator)
    post = await sharing.publish(creator.id, first.id)
    await imports.import_one(reader.id, post.id)

    creator_stats = await sharing.sharing_stats(creator.id)
    reader_stats = await sharing.sharing_stats(reader.id)

    assert creator_stats.total_local == 2
    assert creator_stats.total_shared == 1
    assert creator_stats.total_imports_by_others == 1
    assert reader_stats.total_imported == 1
    assert reader_stats.total_local == 0
    assert reader_stats.total_imports_by_others == 0


async def test_concurrent_publish_is_already_shared(sharing, seed, monkeypatch):
    """The unique origin_item_id decides a publish race the precheck missed."""
    user = await seed.user(alias="kana")
    item = await seed.item(user)
    first = await sharing.publish(user.id, item.id)

    async def stale_lookup(db, item_id):
        return None

    monkeypatch.setattr(sharing, "_find_post", stale_lookup)
    second = await sharing.publish(user.id, item.id)

    assert isinstance(second, AlreadySharedError)
    posts = await seed.all(PublishedPost)
    assert [p.id for p in posts] == [first.id]
