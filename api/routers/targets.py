"""Nutrition targets and adaptive TDEE router for the Adaptus API."""
from fastapi import APIRouter, Query

from api.dependencies import DBSession, Today
from api.schemas import TargetsRead, TargetsRefresh, TargetsUpdate, TdeeBreakdown
from database.models import get_targets
from services.targets import TargetService

router = APIRouter()


@router.get("/adaptive-tdee", response_model=TdeeBreakdown)
async def get_adaptive_tdee(session: DBSession, today: Today):
    """Full calculation breakdown for today."""
    return await TargetService.get_adaptive_tdee(session, today)


@router.get("/targets", response_model=TargetsRead)
async def read_targets(session: DBSession):
    """Current cached targets."""
    targets = await get_targets(session)
    await session.commit()
    return TargetsRead.model_validate(targets)


@router.put("/targets", response_model=TargetsRead)
async def update_targets(data: TargetsUpdate, session: DBSession):
    """Manually override the cached targets."""
    targets = await get_targets(session)
    targets.calories = data.calories
    targets.protein = data.protein
    targets.carbs = data.carbs
    targets.fat = data.fat
    await session.commit()
    await session.refresh(targets)
    return TargetsRead.model_validate(targets)


@router.post("/targets/refresh", response_model=TargetsRefresh)
async def refresh_targets(
    session: DBSession,
    today: Today,
    threshold_kcal: int | None = Query(None, ge=0),
):
    """Rewrite the cached targets if they drifted past the threshold."""
    result = await TargetService.refresh_if_stale(session, today, threshold_kcal)
    return TargetsRefresh(
        refreshed=result["refreshed"],
        difference_kcal=result["difference_kcal"],
        targets=TargetsRead.model_validate(result["targets"]),
    )
