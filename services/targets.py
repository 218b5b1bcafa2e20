"""Adaptive TDEE breakdown and the cached nutrition targets."""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database.models import BodyWeight, DailyLog, NutritionTargets, Phase, get_profile, get_targets
from services.nutrition_calculator import WINDOW_DAYS, NutritionCalculator
from services.phase_scheduler import PhaseScheduler

logger = logging.getLogger("services.targets")


def log_recalculation(reason: str, old_calories: int | None, new_calories: int, data_status: str) -> None:
    """
    Log a write of the cached nutrition targets.

    Args:
        reason: What triggered the write (profile_update, phase_create, refresh, ...)
        old_calories: Cached calories before the write
        new_calories: Calories written
        data_status: Status of the breakdown the targets came from
    """
    logger.info(
        f"Targets recalculated | Reason: {reason} | Calories: {old_calories} -> {new_calories} | Status: {data_status}"
    )


async def get_latest_weight(session: AsyncSession, on_or_before: Optional[date] = None) -> Optional[BodyWeight]:
    """Most recent weigh-in, optionally ignoring anything logged after ``on_or_before``."""
    stmt = select(BodyWeight)
    if on_or_before is not None:
        stmt = stmt.where(BodyWeight.logged_at < datetime.combine(on_or_before + timedelta(days=1), time.min))
    stmt = stmt.order_by(BodyWeight.logged_at.desc(), BodyWeight.id.desc()).limit(1)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_phases(session: AsyncSession) -> list[Phase]:
    stmt = select(Phase).order_by(Phase.start_date.asc())
    return list((await session.execute(stmt)).scalars().all())


async def get_weight_entries(session: AsyncSession, start: date, end: date) -> list[BodyWeight]:
    """Weight entries logged on days in [start, end)."""
    stmt = (
        select(BodyWeight)
        .where(
            BodyWeight.logged_at >= datetime.combine(start, time.min),
            BodyWeight.logged_at < datetime.combine(end, time.min),
        )
        .order_by(BodyWeight.logged_at.asc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def get_daily_calories(session: AsyncSession, start: date, end: date) -> dict[date, float]:
    """Summed calories per logged day in [start, end); days without entries are absent."""
    stmt = (
        select(DailyLog.date, func.sum(DailyLog.calories))
        .where(DailyLog.date >= start, DailyLog.date < end)
        .group_by(DailyLog.date)
    )
    rows = (await session.execute(stmt)).all()
    return {day: total or 0.0 for day, total in rows}


class TargetService:
    """Reads the calculator inputs from the store and maintains the targets cache."""

    @staticmethod
    async def get_adaptive_tdee(session: AsyncSession, today: date) -> Dict[str, Any]:
        """Full calculation breakdown for ``today``."""
        profile = await get_profile(session)
        phases = await get_phases(session)
        phase = PhaseScheduler.active_phase(phases, today)
        stabilization = PhaseScheduler.stabilization_status(phases, today)

        latest = await get_latest_weight(session, on_or_before=today)
        if latest is None:
            return NutritionCalculator.calculate_breakdown(
                profile, None, phase, stabilization, [], {}, today
            )

        weight_entries = await get_weight_entries(session, today - timedelta(days=2 * WINDOW_DAYS), today)
        daily_calories = await get_daily_calories(session, today - timedelta(days=WINDOW_DAYS), today)

        return NutritionCalculator.calculate_breakdown(
            profile,
            latest.weight_kg,
            phase,
            stabilization,
            weight_entries,
            daily_calories,
            today,
        )

    @staticmethod
    async def _write_targets(session: AsyncSession, breakdown: Dict[str, Any], reason: str) -> NutritionTargets:
        targets = await get_targets(session)
        old_calories = targets.calories
        targets.calories = breakdown["final_calories"]
        targets.protein = breakdown["protein_g"]
        targets.carbs = breakdown["carbs_g"]
        targets.fat = breakdown["fat_g"]
        await session.commit()
        await session.refresh(targets)
        log_recalculation(reason, old_calories, targets.calories, breakdown["data_status"])
        return targets

    @staticmethod
    async def recalculate_targets(
        session: AsyncSession, today: date, reason: str = "manual"
    ) -> Optional[NutritionTargets]:
        """Overwrite the cached targets from a fresh breakdown.

        Leaves the cache untouched and returns None while no weight is logged.
        """
        breakdown = await TargetService.get_adaptive_tdee(session, today)
        if breakdown["data_status"] == "no_weight":
            logger.info(f"Skipping target recalculation ({reason}): no body weight logged")
            return None
        return await TargetService._write_targets(session, breakdown, reason)

    @staticmethod
    async def refresh_if_stale(
        session: AsyncSession, today: date, threshold_kcal: int | None = None
    ) -> Dict[str, Any]:
        """Write fresh targets only when they drift more than ``threshold_kcal`` from the cache."""
        threshold = settings.TARGET_REFRESH_THRESHOLD_KCAL if threshold_kcal is None else threshold_kcal
        targets = await get_targets(session)
        breakdown = await TargetService.get_adaptive_tdee(session, today)

        if breakdown["data_status"] == "no_weight":
            return {"refreshed": False, "difference_kcal": None, "targets": targets}

        difference = breakdown["final_calories"] - targets.calories
        if abs(difference) <= threshold:
            return {"refreshed": False, "difference_kcal": difference, "targets": targets}

        logger.info(f"Cached targets stale by {difference} kcal (threshold {threshold}), refreshing")
        targets = await TargetService._write_targets(session, breakdown, "refresh")
        return {"refreshed": True, "difference_kcal": difference, "targets": targets}
