"""Post Routes — publish, unpublish, sharing status and single import.

Invariants:
    - Every route acts as the X-User-Id user
    - Domain errors returned by services are raised into the global handler (unwrap)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from kondo.api.dependencies import (
    get_current_user_id,
    get_deletion_service,
    get_import_service,
    get_sharing_service,
    unwrap,
)
from kondo.schemas.deletion import DeletionResponse
from kondo.schemas.sharing import (
    ImportRequest,
    ImportResponse,
    PostResponse,
    PublishRequest,
    SharingStatusResponse,
    StreakSummary,
)
from kondo.services.cascade_deletion import CascadeDeletionService
from kondo.services.import_service import ImportService
from kondo.services.sharing_service import SharingService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.post(
    "", response_model=PostResponse, status_code=status.HTTP_201_CREATED,
)
async def publish_post(
    body: PublishRequest,
    user_id: UUID = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
):
    """Publish one of the user's content items to the community."""
    post = unwrap(await sharing.publish(user_id, body.content_item_id))
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=DeletionResponse)
async def unpublish_post(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    deletion: CascadeDeletionService = Depends(get_deletion_service),
):
    """Withdraw a published post. Imported copies stay with their importers."""
    outcome = unwrap(await deletion.unpublish(user_id, post_id))
    return DeletionResponse.model_validate(outcome, from_attributes=True)


@router.get("/by-item/{item_id}", response_model=SharingStatusResponse)
async def sharing_status(
    item_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
):
    result = await sharing.is_shared(item_id)
    return SharingStatusResponse(
        is_shared=result.is_shared,
        post=PostResponse.model_validate(result.post) if result.post else None,
    )


@router.post(
    "/{post_id}/imports",
    response_model=ImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_post(
    post_id: UUID,
    body: ImportRequest,
    user_id: UUID = Depends(get_current_user_id),
    imports: ImportService = Depends(get_import_service),
):
    """Import a published post into the user's library."""
    outcome = unwrap(await imports.import_one(
        user_id, post_id, body.collection_id, body.timezone,
    ))
    return ImportResponse(
        item_id=outcome.item_id,
        post_id=outcome.post_id,
        collection_id=outcome.collection_id,
        collection_title=outcome.collection_title,
        was_collection_created=outcome.was_collection_created,
        streak=(
            StreakSummary.model_validate(outcome.streak, from_attributes=True)
            if outcome.streak else None
        ),
        warnings=outcome.warnings,
    )
