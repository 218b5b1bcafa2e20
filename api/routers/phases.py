"""Dietary phase calendar router for the Adaptus API."""
import logging

from fastapi import APIRouter, HTTPException

from api.dependencies import DBSession, Today
from api.schemas import PhaseList, PhaseRead, PhaseWrite
from services.exceptions import PhaseValidationError
from services.phases import PhaseService

logger = logging.getLogger("api.phases")

router = APIRouter()


@router.get("", response_model=PhaseList)
async def list_phases(session: DBSession, today: Today):
    """All phases by start date, plus the active phase and stabilization status."""
    result = await PhaseService.list_phases(session, today)
    return PhaseList(
        phases=[PhaseRead.model_validate(p) for p in result["phases"]],
        active_phase=result["active_phase"],
        stabilization=result["stabilization"],
    )


@router.post("", response_model=PhaseRead, status_code=201)
async def create_phase(data: PhaseWrite, session: DBSession, today: Today):
    """Create a phase; rejected if it overlaps another one."""
    try:
        phase = await PhaseService.create_phase(
            session, data.phase_type, data.start_date, data.end_date, today
        )
    except PhaseValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return PhaseRead.model_validate(phase)


@router.put("/{phase_id}", response_model=PhaseRead)
async def update_phase(phase_id: int, data: PhaseWrite, session: DBSession, today: Today):
    """Update a phase; the overlap check ignores the phase itself."""
    try:
        phase = await PhaseService.update_phase(
            session, phase_id, data.phase_type, data.start_date, data.end_date, today
        )
    except PhaseValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    if phase is None:
        raise HTTPException(status_code=404, detail="Phase not found")
    return PhaseRead.model_validate(phase)


@router.delete("/{phase_id}", status_code=204)
async def delete_phase(phase_id: int, session: DBSession, today: Today):
    """Delete a phase. Deleting an unknown id is a no-op."""
    await PhaseService.delete_phase(session, phase_id, today)
