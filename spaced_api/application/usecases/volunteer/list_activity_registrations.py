"""
USE CASE: List Activity Registrations (admin)

Responsibilities:
    - Devolver todas las inscripciones de una actividad (cualquier estado),
      más antiguas primero; NOT_FOUND si la actividad no existe.
"""

from __future__ import annotations

from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ACTIVITY_NOT_FOUND_MESSAGE,
    RegistrationListResult,
    VolunteerError,
    VolunteerErrorCode,
)


class ListActivityRegistrationsUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, activity_id: int) -> RegistrationListResult:
        if self._volunteers.get_activity(activity_id) is None:
            return RegistrationListResult(
                error=VolunteerError(
                    code=VolunteerErrorCode.NOT_FOUND,
                    message=ACTIVITY_NOT_FOUND_MESSAGE,
                )
            )
        return RegistrationListResult(
            registrations=self._volunteers.list_registrations(activity_id)
        )
