"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ContentItemId, PostId, CollectionId wrap UUIDs and type every service entry point
    - Entity ids that may name either an item or a post (artifact cache) stay bare UUID
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders, map 1:1 to DB string columns
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ContentItemId = NewType("ContentItemId", UUID)
PostId = NewType("PostId", UUID)
CollectionId = NewType("CollectionId", UUID)
LanguageId = NewType("LanguageId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class ContentSource(str, Enum):
    """Where a content item came from — maps to DB `source` column."""
    LOCAL = "local"
    IMPORTED = "imported"


class ArtifactVariant(str, Enum):
    """Derived artifacts cached per content item / published post."""
    BREAKDOWN_DESKTOP = "breakdown-desktop"
    BREAKDOWN_MOBILE = "breakdown-mobile"
    PHONETIC = "phonetic"
    AUDIO = "audio"


class CascadeStep(str, Enum):
    """Ordered steps of a content item deletion."""
    CHECK_IMPACT = "check_impact"
    DELETE_CHILDREN = "delete_children"
    DELETE_POST = "delete_post"
    RELEASE_IMPORT = "release_import"
    DELETE_PARENT = "delete_parent"


# ─── Constants ───────────────────────────────────────────────────

DEFAULT_TIMEZONE = "UTC"
