"""Content Item Routes — deletion impact and cascading delete.

Invariants:
    - deletion-impact is read-only and never fails for non-owners (can_delete=false)
    - DELETE runs the whole cascade in one transaction
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from kondo.api.dependencies import get_current_user_id, get_deletion_service, unwrap
from kondo.schemas.deletion import DeletionResponse, ImpactResponse
from kondo.services.cascade_deletion import CascadeDeletionService

router = APIRouter(prefix="/api/v1/content-items", tags=["content-items"])


@router.get("/{item_id}/deletion-impact", response_model=ImpactResponse)
async def deletion_impact(
    item_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    deletion: CascadeDeletionService = Depends(get_deletion_service),
):
    impact = unwrap(await deletion.check_impact(user_id, item_id))
    return ImpactResponse.model_validate(impact, from_attributes=True)


@router.delete("/{item_id}", response_model=DeletionResponse)
async def delete_content_item(
    item_id: UUID,
    collection_id: list[UUID] | None = Query(None),
    user_id: UUID = Depends(get_current_user_id),
    deletion: CascadeDeletionService = Depends(get_deletion_service),
):
    """Delete an item, its post, importers' copies and import bookkeeping."""
    outcome = unwrap(await deletion.delete_with_cascade(
        user_id, item_id, collection_id,
    ))
    return DeletionResponse.model_validate(outcome, from_attributes=True)
