"""Sharing Rule Enforcement — preconditions for publish, import and delete.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a KondoError on violation, None on success
    - validate_* functions chain checks — first error wins
    - Every check runs before any mutation (no transaction has written yet)

Design Decisions:
    - Errors returned, not raised: services hand them back as typed failure values,
      keeping the error path identical to the success path (ADR: uniform result shape)
    - Rows are duck-typed (ORM objects or None) so checks are testable with plain stubs
"""

from uuid import UUID

from kondo.core.errors import (
    AlreadyImportedError,
    AlreadySharedError,
    ErrorContext,
    KondoError,
    NoPublicAliasError,
    NotOwnerError,
    ResourceNotFoundError,
    SelfImportError,
)


def check_public_alias(user, user_id: UUID) -> KondoError | None:
    """Publishing requires a non-empty alias marked public."""
    if user is None or not user.alias or not user.is_alias_public:
        return NoPublicAliasError(ErrorContext(user_id=str(user_id)))
    return None


def check_exists(row, resource_type: str, resource_id: UUID) -> KondoError | None:
    """Row must have been found."""
    if row is None:
        return ResourceNotFoundError(resource_type, str(resource_id))
    return None


def check_owner(
    owner_id: UUID, user_id: UUID, resource_type: str,
) -> KondoError | None:
    """Only the owner may act on the resource."""
    if owner_id != user_id:
        return NotOwnerError(
            resource_type, ErrorContext(user_id=str(user_id)),
        )
    return None


def check_not_published(existing_post) -> KondoError | None:
    """At most one published post per content item."""
    if existing_post is not None:
        return AlreadySharedError(
            ErrorContext(resource_id=str(existing_post.id)),
        )
    return None


def validate_publish(
    user, item, existing_post, user_id: UUID, item_id: UUID,
) -> KondoError | None:
    """Chain all publish preconditions. Returns first error or None."""
    return (
        check_public_alias(user, user_id)
        or check_exists(item, "ContentItem", item_id)
        or check_owner(item.user_id, user_id, "content items")
        or check_not_published(existing_post)
    )


def check_post_available(post, post_id: UUID) -> KondoError | None:
    """Post must exist and still be active."""
    if post is None or not post.is_active:
        return ResourceNotFoundError("PublishedPost", str(post_id))
    return None


def check_not_self_import(post, user_id: UUID) -> KondoError | None:
    """Creators cannot import their own posts."""
    if post.creator_id == user_id:
        return SelfImportError(ErrorContext(user_id=str(user_id)))
    return None


def check_not_imported(existing_record) -> KondoError | None:
    """At most one import per (user, post)."""
    if existing_record is not None:
        return AlreadyImportedError(
            ErrorContext(resource_id=str(existing_record.post_id)),
        )
    return None


def check_target_collection(
    collection, collection_id: UUID | None, user_id: UUID,
) -> KondoError | None:
    """An explicit target collection must exist and belong to the user."""
    if collection_id is None:
        return None
    return (
        check_exists(collection, "Collection", collection_id)
        or check_owner(collection.user_id, user_id, "collections")
    )


def validate_import(
    post, existing_record, collection, post_id: UUID,
    collection_id: UUID | None, user_id: UUID,
) -> KondoError | None:
    """Chain all single-import preconditions. Returns first error or None."""
    return (
        check_post_available(post, post_id)
        or check_not_self_import(post, user_id)
        or check_not_imported(existing_record)
        or check_target_collection(collection, collection_id, user_id)
    )


def validate_delete(item, item_id: UUID, user_id: UUID) -> KondoError | None:
    """Content item must exist and be owned by the user."""
    return (
        check_exists(item, "ContentItem", item_id)
        or check_owner(item.user_id, user_id, "content items")
    )
