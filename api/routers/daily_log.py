"""Daily calorie log router for the Adaptus API."""
from datetime import datetime, timedelta

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import func, select

from api.dependencies import DBSession, Today
from api.schemas import (
    CopyDayRequest,
    CopyDayResult,
    DailyLogCreate,
    DailyLogDay,
    DailyLogRead,
    HistoryDay,
    LogEntryUpdate,
    LogFoodRequest,
    LogHistory,
    LogMealRequest,
    MacroTotals,
    TargetsRead,
)
from database.models import DailyLog, get_targets
from services.catalog import LogService
from services.exceptions import LogEditError, NotFoundError
from services.nutrition_calculator import round_half_up

router = APIRouter()


@router.get("/log/history", response_model=LogHistory)
async def log_history(session: DBSession, today: Today, days: int = Query(7, ge=1, le=365)):
    """Per-day totals for the last ``days`` days (today included), zero-filled."""
    start = today - timedelta(days=days - 1)
    stmt = (
        select(
            DailyLog.date,
            func.sum(DailyLog.calories),
            func.sum(DailyLog.protein),
            func.sum(DailyLog.carbs),
            func.sum(DailyLog.fat),
        )
        .where(DailyLog.date >= start, DailyLog.date <= today)
        .group_by(DailyLog.date)
    )
    rows = {row[0]: row[1:] for row in (await session.execute(stmt)).all()}

    history = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        calories, protein, carbs, fat = rows.get(day, (0, 0, 0, 0))
        history.append(
            HistoryDay(
                date=day,
                calories=round_half_up(calories or 0),
                protein=round_half_up(protein or 0),
                carbs=round_half_up(carbs or 0),
                fat=round_half_up(fat or 0),
            )
        )

    targets = await get_targets(session)
    await session.commit()
    return LogHistory(days=history, targets=TargetsRead.model_validate(targets))


@router.get("/log", response_model=DailyLogDay)
async def get_day_log(session: DBSession, today: Today):
    """Entries and totals for a day (``?date=`` or today)."""
    stmt = select(DailyLog).where(DailyLog.date == today).order_by(DailyLog.logged_at.asc())
    entries = (await session.execute(stmt)).scalars().all()

    totals = MacroTotals(
        calories=sum(e.calories for e in entries),
        protein=sum(e.protein for e in entries),
        carbs=sum(e.carbs for e in entries),
        fat=sum(e.fat for e in entries),
    )
    return DailyLogDay(
        date=today,
        entries=[DailyLogRead.model_validate(e) for e in entries],
        totals=totals,
    )


@router.post("/log", response_model=DailyLogRead, status_code=201)
async def create_log_entry(data: DailyLogCreate, session: DBSession, today: Today):
    """Log food eaten; defaults to today."""
    entry = DailyLog(
        date=data.log_date or today,
        name=data.name,
        calories=data.calories,
        protein=data.protein,
        carbs=data.carbs,
        fat=data.fat,
        logged_at=datetime.now(),
    )
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return DailyLogRead.model_validate(entry)


@router.post("/log/food", response_model=DailyLogRead, status_code=201)
async def log_food(data: LogFoodRequest, session: DBSession, today: Today):
    """Log grams of a catalog food; defaults to today."""
    try:
        entry = await LogService.log_food(session, data.food_id, data.grams, data.log_date or today)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DailyLogRead.model_validate(entry)


@router.post("/log/meal", response_model=DailyLogRead, status_code=201)
async def log_meal(data: LogMealRequest, session: DBSession, today: Today):
    """Log servings of a saved meal; defaults to today."""
    try:
        entry = await LogService.log_meal(session, data.meal_id, data.servings, data.log_date or today)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DailyLogRead.model_validate(entry)


@router.post("/log/copy-day", response_model=CopyDayResult)
async def copy_day(data: CopyDayRequest, session: DBSession):
    """Duplicate every entry of one day onto another."""
    stmt = (
        select(DailyLog)
        .where(DailyLog.date == data.source_date)
        .order_by(DailyLog.logged_at.asc())
    )
    source = (await session.execute(stmt)).scalars().all()

    copies = [
        DailyLog(
            date=data.target_date,
            food_id=e.food_id,
            meal_id=e.meal_id,
            servings=e.servings,
            name=e.name,
            calories=e.calories,
            protein=e.protein,
            carbs=e.carbs,
            fat=e.fat,
            logged_at=datetime.now(),
        )
        for e in source
    ]
    if copies:
        session.add_all(copies)
        await session.commit()
        for copy in copies:
            await session.refresh(copy)

    return CopyDayResult(
        copied=len(copies),
        entries=[DailyLogRead.model_validate(c) for c in copies],
    )


@router.put("/log/{entry_id}", response_model=DailyLogRead)
async def update_log_entry(entry_id: int, data: LogEntryUpdate, session: DBSession):
    """Change the amount of a food or meal entry; macros are recomputed from the catalog."""
    try:
        entry = await LogService.update_servings(session, entry_id, data.servings)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LogEditError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DailyLogRead.model_validate(entry)


@router.delete("/log/{entry_id}", status_code=204)
async def delete_log_entry(entry_id: int, session: DBSession):
    """Remove a log entry. Unknown ids are ignored."""
    entry = await session.get(DailyLog, entry_id)
    if entry:
        await session.delete(entry)
        await session.commit()
