"""User Routes — per-user sharing statistics."""

from uuid import UUID

from fastapi import APIRouter, Depends

from kondo.api.dependencies import get_current_user_id, get_sharing_service
from kondo.schemas.sharing import SharingStatsResponse
from kondo.services.sharing_service import SharingService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me/sharing-stats", response_model=SharingStatsResponse)
async def sharing_stats(
    user_id: UUID = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
):
    stats = await sharing.sharing_stats(user_id)
    return SharingStatsResponse.model_validate(stats, from_attributes=True)
