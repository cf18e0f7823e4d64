"""Streak Routes — record activity and read the current streak."""

from uuid import UUID

from fastapi import APIRouter, Depends

from kondo.api.dependencies import get_current_user_id, get_streak_tracker, unwrap
from kondo.schemas.streaks import ActivityRequest, StreakResponse, StreakTotalsResponse
from kondo.services.streak_tracker import StreakTracker

router = APIRouter(prefix="/api/v1/streaks", tags=["streaks"])


@router.post("/activity", response_model=StreakResponse)
async def record_activity(
    body: ActivityRequest,
    user_id: UUID = Depends(get_current_user_id),
    streaks: StreakTracker = Depends(get_streak_tracker),
):
    """Count one qualifying activity for today (idempotent per local day)."""
    transition = unwrap(await streaks.record_activity(user_id, body.timezone))
    return StreakResponse.model_validate(transition, from_attributes=True)


@router.get("/me", response_model=StreakTotalsResponse)
async def my_streak(
    user_id: UUID = Depends(get_current_user_id),
    streaks: StreakTracker = Depends(get_streak_tracker),
):
    snapshot = await streaks.get_streak(user_id)
    return StreakTotalsResponse(
        current_streak=snapshot.current_streak,
        max_streak=snapshot.max_streak,
    )
