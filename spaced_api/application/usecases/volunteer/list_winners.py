"""
===============================================================================
USE CASE: List Winners
===============================================================================

Class:
    ListWinnersUseCase

Responsibilities:
    - Exponer a cualquier sesión los ganadores (inscripciones `confirmed`) de
      una actividad con resultado publicado.
    - Enmascarar el nombre visible (`김철수` -> `김*수`); ni employee_id ni el
      nombre completo salen de este caso.

Rules:
    - Actividad inexistente o resultado no publicado (nunca sorteada, o
      despublicada) => NOT_FOUND.

Collaborators:
    - VolunteerRepository.get_activity / list_registrations
    - domain.entities.mask_display_name
===============================================================================
"""

from __future__ import annotations

from ....domain.entities import RegistrationStatus, mask_display_name
from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ACTIVITY_NOT_FOUND_MESSAGE,
    RESULT_NOT_PUBLISHED_MESSAGE,
    VolunteerError,
    VolunteerErrorCode,
    Winner,
    WinnerListResult,
)


class ListWinnersUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, activity_id: int) -> WinnerListResult:
        activity = self._volunteers.get_activity(activity_id)
        if activity is None:
            return _not_found(ACTIVITY_NOT_FOUND_MESSAGE)
        if not activity.is_published:
            return _not_found(RESULT_NOT_PUBLISHED_MESSAGE)

        confirmed = self._volunteers.list_registrations(
            activity_id, RegistrationStatus.CONFIRMED
        )
        return WinnerListResult(
            activity=activity,
            winners=[
                Winner(registration_id=r.id, masked_name=mask_display_name(r.user_name))
                for r in confirmed
            ],
        )


def _not_found(message: str) -> WinnerListResult:
    return WinnerListResult(
        error=VolunteerError(code=VolunteerErrorCode.NOT_FOUND, message=message)
    )
