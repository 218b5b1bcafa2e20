"""Body-weight tracking router for the Adaptus API."""
from datetime import datetime, timedelta

from fastapi import APIRouter, Query
from sqlalchemy import select

from api.dependencies import DBSession, Today
from api.schemas import WeightLogCreate, WeightLogRead, WeightSummary
from database.models import BodyWeight
from services.nutrition_calculator import WINDOW_DAYS, NutritionCalculator, round_half_up
from services.targets import get_latest_weight, get_weight_entries

router = APIRouter()

TREND_THRESHOLD_KG = 0.2


@router.post("", response_model=WeightLogRead, status_code=201)
async def log_weight(data: WeightLogCreate, session: DBSession):
    """Log a weigh-in."""
    log = BodyWeight(
        weight_kg=data.weight_kg,
        logged_at=data.logged_at or datetime.now(),
    )
    session.add(log)
    await session.commit()
    await session.refresh(log)
    return WeightLogRead.model_validate(log)


@router.get("/latest", response_model=WeightLogRead | None)
async def latest_weight(session: DBSession):
    """Most recent weigh-in, or null."""
    log = await get_latest_weight(session)
    return WeightLogRead.model_validate(log) if log else None


@router.get("/summary", response_model=WeightSummary)
async def weight_summary(session: DBSession, today: Today):
    """Current weight, 7-day average (today included) and direction of travel."""
    latest = await get_latest_weight(session, on_or_before=today)
    window_end = today + timedelta(days=1)
    entries = await get_weight_entries(session, window_end - timedelta(days=2 * WINDOW_DAYS), window_end)
    avg_7d, count_7d, avg_prev, _ = NutritionCalculator.window_averages(entries, window_end)

    trend = None
    if avg_7d is not None and avg_prev is not None:
        diff = avg_7d - avg_prev
        if diff > TREND_THRESHOLD_KG:
            trend = "up"
        elif diff < -TREND_THRESHOLD_KG:
            trend = "down"
        else:
            trend = "stable"

    return WeightSummary(
        current=latest.weight_kg if latest else None,
        current_date=latest.logged_at if latest else None,
        avg_7d=round_half_up(avg_7d, 1) if avg_7d is not None else None,
        entries_7d=count_7d,
        trend=trend,
    )


@router.get("/history", response_model=list[WeightLogRead])
async def weight_history(session: DBSession, limit: int = Query(30, ge=1, le=365)):
    """The ``limit`` most recent weigh-ins, oldest first."""
    stmt = (
        select(BodyWeight)
        .order_by(BodyWeight.logged_at.desc(), BodyWeight.id.desc())
        .limit(limit)
    )
    logs = (await session.execute(stmt)).scalars().all()
    return [WeightLogRead.model_validate(log) for log in reversed(logs)]


@router.delete("/{log_id}", status_code=204)
async def delete_weight(log_id: int, session: DBSession):
    """Delete a mis-entered weigh-in. Unknown ids are ignored."""
    log = await session.get(BodyWeight, log_id)
    if log:
        await session.delete(log)
        await session.commit()
