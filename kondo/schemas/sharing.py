"""Sharing Schemas — publish, import and sharing-stats contracts.

Invariants:
    - Label for bulk import: 1-200 chars, stripped, non-empty
    - Timezone is an optional IANA name; validity checked by the streak core, not here

Design Decisions:
    - from_attributes=True on responses built straight from ORM rows
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PublishRequest(BaseModel):
    content_item_id: UUID


class PostResponse(BaseModel):
    """Published post — public-facing data, artifacts omitted."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    origin_item_id: UUID
    creator_alias: str
    label: str
    language_id: UUID | None
    content: str
    import_count: int
    is_active: bool
    shared_at: datetime


class SharingStatusResponse(BaseModel):
    is_shared: bool
    post: PostResponse | None = None


class SharingStatsResponse(BaseModel):
    total_local: int
    total_imported: int
    total_shared: int
    total_imports_by_others: int


class ImportRequest(BaseModel):
    collection_id: UUID | None = None
    timezone: str | None = Field(None, max_length=64)


class BulkImportRequest(BaseModel):
    """Import every post filed under `label`."""
    label: str = Field(min_length=1, max_length=200)
    collection_id: UUID | None = None
    timezone: str | None = Field(None, max_length=64)

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("label cannot be empty or whitespace")
        return v


class StreakSummary(BaseModel):
    """Streak state attached to a successful import."""
    current_streak: int
    max_streak: int
    is_new_streak: bool
    was_streak_broken: bool


class ImportResponse(BaseModel):
    item_id: UUID
    post_id: UUID
    collection_id: UUID
    collection_title: str
    was_collection_created: bool
    streak: StreakSummary | None = None
    warnings: list[str] = []


class BulkImportResponse(BaseModel):
    label: str
    imported_count: int
    imported_item_ids: list[UUID]
    skipped_post_ids: list[UUID]
    collection_id: UUID | None
    collection_title: str | None
    was_collection_created: bool
    streak: StreakSummary | None = None
    warnings: list[str] = []
