"""Phase CRUD with non-overlap validation and target recalculation."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Phase
from services.exceptions import PhaseValidationError
from services.phase_scheduler import PhaseScheduler
from services.targets import TargetService, get_phases

logger = logging.getLogger("services.phases")


class PhaseService:
    """Writes to the phase calendar.

    Every write validates against all other phases before touching the
    session, so a rejected request leaves the store unchanged. Successful
    writes refresh the cached targets for ``today``.
    """

    @staticmethod
    async def list_phases(session: AsyncSession, today: date) -> Dict[str, Any]:
        phases = await get_phases(session)
        return {
            "phases": phases,
            "active_phase": PhaseScheduler.active_phase(phases, today),
            "stabilization": PhaseScheduler.stabilization_status(phases, today),
        }

    @staticmethod
    async def create_phase(
        session: AsyncSession, phase_type: str, start_date: date, end_date: date, today: date
    ) -> Phase:
        phases = await get_phases(session)
        try:
            PhaseScheduler.validate(phases, phase_type, start_date, end_date)
        except PhaseValidationError as e:
            logger.info(f"Rejected phase create [{e.code}]: {phase_type} {start_date} - {end_date}")
            raise

        phase = Phase(phase_type=phase_type, start_date=start_date, end_date=end_date)
        session.add(phase)
        await session.commit()
        await session.refresh(phase)
        logger.info(f"Created phase {phase.id}: {phase_type} {start_date} - {end_date}")

        await TargetService.recalculate_targets(session, today, reason="phase_create")
        return phase

    @staticmethod
    async def update_phase(
        session: AsyncSession,
        phase_id: int,
        phase_type: str,
        start_date: date,
        end_date: date,
        today: date,
    ) -> Optional[Phase]:
        """Returns None when the phase does not exist."""
        phase = await session.get(Phase, phase_id)
        if phase is None:
            return None

        phases = await get_phases(session)
        try:
            PhaseScheduler.validate(phases, phase_type, start_date, end_date, exclude_id=phase_id)
        except PhaseValidationError as e:
            logger.info(f"Rejected phase {phase_id} update [{e.code}]: {phase_type} {start_date} - {end_date}")
            raise

        phase.phase_type = phase_type
        phase.start_date = start_date
        phase.end_date = end_date
        await session.commit()
        await session.refresh(phase)

        await TargetService.recalculate_targets(session, today, reason="phase_update")
        return phase

    @staticmethod
    async def delete_phase(session: AsyncSession, phase_id: int, today: date) -> bool:
        """Idempotent; returns whether a row was removed."""
        phase = await session.get(Phase, phase_id)
        if phase is not None:
            await session.delete(phase)
            await session.commit()
            logger.info(f"Deleted phase {phase_id}")

        await TargetService.recalculate_targets(session, today, reason="phase_delete")
        return phase is not None
