"""Profile router for the Adaptus API."""
from fastapi import APIRouter

from api.dependencies import DBSession, Today
from api.schemas import ProfileRead, ProfileUpdate
from services.profile import ProfileService

router = APIRouter()


@router.get("", response_model=ProfileRead)
async def get_profile(session: DBSession, today: Today):
    """Profile with current weight and today's phase."""
    return await ProfileService.get_profile_view(session, today)


@router.put("", response_model=ProfileRead)
async def update_profile(data: ProfileUpdate, session: DBSession, today: Today):
    """Update the profile and recalculate the cached targets."""
    await ProfileService.update_profile(
        session, data.gender, data.age, data.height_cm, data.activity_level, today
    )
    return await ProfileService.get_profile_view(session, today)
