"""Bulk Import Routes — import every post under a label."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from kondo.api.dependencies import get_current_user_id, get_import_service, unwrap
from kondo.schemas.sharing import BulkImportRequest, BulkImportResponse, StreakSummary
from kondo.services.import_service import ImportService

router = APIRouter(prefix="/api/v1/imports", tags=["imports"])


@router.post(
    "/collections",
    response_model=BulkImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_collection(
    body: BulkImportRequest,
    user_id: UUID = Depends(get_current_user_id),
    imports: ImportService = Depends(get_import_service),
):
    outcome = unwrap(await imports.import_all(
        user_id, body.label, body.collection_id, body.timezone,
    ))
    return BulkImportResponse(
        label=outcome.label,
        imported_count=outcome.imported_count,
        imported_item_ids=outcome.imported_item_ids,
        skipped_post_ids=outcome.skipped_post_ids,
        collection_id=outcome.collection_id,
        collection_title=outcome.collection_title,
        was_collection_created=outcome.was_collection_created,
        streak=(
            StreakSummary.model_validate(outcome.streak, from_attributes=True)
            if outcome.streak else None
        ),
        warnings=outcome.warnings,
    )
