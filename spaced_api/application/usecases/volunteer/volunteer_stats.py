"""
===============================================================================
USE CASE: Volunteer Stats (priority score view)
===============================================================================

Class:
    VolunteerStatsUseCase

Responsibilities:
    - Contar participaciones confirmadas por employee_id en un año calendario
      (zona del sorteo); es el mismo puntaje que usa el ranking.
    - Ordenar por cantidad DESC y luego employee_id ASC.

Collaborators:
    - VolunteerRepository.count_confirmed_by_employee (employee_ids=None)
    - crosscutting.clock.year_bounds
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.clock import Clock, year_bounds
from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ParticipationCount,
    ParticipationStatsResult,
    VolunteerError,
    VolunteerErrorCode,
)

MIN_YEAR = 2000
MAX_YEAR = 9999
INVALID_YEAR_MESSAGE = "올바른 연도를 입력해주세요."


class VolunteerStatsUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository, clock: Clock) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock

    def execute(self, year: int | None = None) -> ParticipationStatsResult:
        target_year = year if year is not None else self._clock.now().year
        if not MIN_YEAR <= target_year <= MAX_YEAR:
            return ParticipationStatsResult(
                year=target_year,
                error=VolunteerError(
                    code=VolunteerErrorCode.VALIDATION_ERROR,
                    message=INVALID_YEAR_MESSAGE,
                ),
            )

        start, end = year_bounds(self._clock, target_year)
        counts = self._volunteers.count_confirmed_by_employee(None, start, end)
        entries = [
            ParticipationCount(employee_id=employee_id, confirmed=count)
            for employee_id, count in sorted(
                counts.items(), key=lambda item: (-item[1], item[0])
            )
        ]
        return ParticipationStatsResult(year=target_year, entries=entries)
