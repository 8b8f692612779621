from fastapi import APIRouter, Depends

from app.api.deps import get_session_service
from app.schemas.stats import UserStatsResponse
from app.services.session_service import SessionService

router = APIRouter()


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user_id: str,
    sessions: SessionService = Depends(get_session_service)
):
    """Lifetime results across settled sessions"""
    return await sessions.get_user_stats(user_id)
