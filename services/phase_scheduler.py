"""Dietary phase calendar: active phase resolution and stabilization windows."""
import logging
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from config import settings
from services.exceptions import PhaseValidationError

logger = logging.getLogger("services.phase_scheduler")

PHASE_TYPES = ("cut", "maintain", "bulk")
DEFAULT_PHASE = "maintain"


class PhaseScheduler:
    """Answers "which phase applies on day D" over a set of phase rows.

    Every method is a pure function of the phases passed in and the day;
    rows only need ``id``, ``phase_type``, ``start_date`` and ``end_date``
    (end exclusive).
    """

    @staticmethod
    def covering_phase(phases: Iterable[Any], day: date) -> Optional[Any]:
        """Phase with start <= day < end; latest start wins if rows overlap."""
        matches = [p for p in phases if p.start_date <= day < p.end_date]
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                f"Overlapping phases cover {day}: {[p.id for p in matches]}, using latest start"
            )
        return max(matches, key=lambda p: p.start_date)

    @staticmethod
    def active_phase(phases: Iterable[Any], day: date) -> str:
        current = PhaseScheduler.covering_phase(phases, day)
        return current.phase_type if current else DEFAULT_PHASE

    @staticmethod
    def previous_phase(phases: Iterable[Any], current: Any) -> Optional[Any]:
        """Most recently ended phase that ends at or before ``current`` starts."""
        earlier = [p for p in phases if p.end_date <= current.start_date]
        if not earlier:
            return None
        return max(earlier, key=lambda p: p.end_date)

    @staticmethod
    def stabilization_status(
        phases: Sequence[Any],
        day: date,
        window_days: int | None = None,
    ) -> dict[str, Any]:
        """Whether ``day`` falls inside the window after a diet-type change.

        The window opens on the start date of a phase whose type differs
        from the phase before it and lasts ``window_days`` days.
        """
        window = settings.STABILIZATION_DAYS if window_days is None else window_days

        current = PhaseScheduler.covering_phase(phases, day)
        if current is None:
            return {"in_stabilization": False}

        previous = PhaseScheduler.previous_phase(phases, current)
        if previous is None or previous.phase_type == current.phase_type:
            return {"in_stabilization": False}

        days_since_boundary = (day - current.start_date).days
        if days_since_boundary < window:
            return {"in_stabilization": True, "days_remaining": window - days_since_boundary}
        return {"in_stabilization": False}

    @staticmethod
    def validate(
        phases: Iterable[Any],
        phase_type: str,
        start_date: date,
        end_date: date,
        exclude_id: int | None = None,
    ) -> None:
        """Raise PhaseValidationError if the candidate phase cannot be written.

        ``exclude_id`` leaves the phase being updated out of the overlap check.
        """
        if phase_type not in PHASE_TYPES:
            raise PhaseValidationError("bad_type", "phase_type must be cut, maintain, or bulk")
        if start_date >= end_date:
            raise PhaseValidationError("bad_range", "start_date must be before end_date")

        for other in phases:
            if exclude_id is not None and other.id == exclude_id:
                continue
            if other.start_date < end_date and start_date < other.end_date:
                raise PhaseValidationError(
                    "overlap",
                    f"Phase overlaps with an existing phase ({other.phase_type} "
                    f"{other.start_date.isoformat()} to {other.end_date.isoformat()})",
                )
