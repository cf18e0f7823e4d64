"""Deletion Schemas — impact report and cascade outcome."""

from uuid import UUID

from pydantic import BaseModel

from kondo.core.domain_types import CascadeStep


class ImpactResponse(BaseModel):
    can_delete: bool
    is_published: bool
    import_count: int
    importer_count: int
    is_imported: bool


class DeletionResponse(BaseModel):
    steps: list[CascadeStep]
    deleted_item_ids: list[UUID]
    deleted_post_id: UUID | None
    cascaded_post_ids: list[UUID] = []
    deleted_import_records: int
    detached_item_ids: list[UUID]
    touched_collection_ids: list[UUID]
