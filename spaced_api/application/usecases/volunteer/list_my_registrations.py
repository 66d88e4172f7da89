"""
USE CASE: List My Registrations

Responsibilities:
    - Devolver las inscripciones del usuario de la sesión (por nombre visible),
      más recientes primero.
"""

from __future__ import annotations

from ....domain.repositories import VolunteerRepository
from .volunteer_results import RegistrationListResult


class ListMyRegistrationsUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, user_name: str) -> RegistrationListResult:
        return RegistrationListResult(
            registrations=self._volunteers.list_registrations_by_user(user_name)
        )
