"""User profile reads and updates."""
from datetime import date
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import UserProfile, get_profile
from services.phase_scheduler import PhaseScheduler
from services.targets import TargetService, get_latest_weight, get_phases


class ProfileService:

    @staticmethod
    async def get_profile_view(session: AsyncSession, today: date) -> Dict[str, Any]:
        """Profile plus latest weight and the phase active on ``today``."""
        profile = await get_profile(session)
        latest = await get_latest_weight(session, on_or_before=today)
        phases = await get_phases(session)
        return {
            "gender": profile.gender,
            "age": profile.age,
            "height_cm": profile.height_cm,
            "activity_level": profile.activity_level,
            "current_weight_kg": latest.weight_kg if latest else None,
            "active_phase": PhaseScheduler.active_phase(phases, today),
        }

    @staticmethod
    async def update_profile(
        session: AsyncSession,
        gender: str,
        age: int,
        height_cm: float,
        activity_level: str,
        today: date,
    ) -> UserProfile:
        profile = await get_profile(session)
        profile.gender = gender
        profile.age = age
        profile.height_cm = height_cm
        profile.activity_level = activity_level
        await session.commit()
        await session.refresh(profile)

        await TargetService.recalculate_targets(session, today, reason="profile_update")
        return profile
