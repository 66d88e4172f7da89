"""
===============================================================================
USE CASE: List Activities
===============================================================================

Class:
    ListActivitiesUseCase

Responsibilities:
    - Listar actividades (opcionalmente filtradas por estado), fecha más
      reciente primero.

Collaborators:
    - VolunteerRepository.list_activities
===============================================================================
"""

from __future__ import annotations

from ....domain.entities import ActivityStatus
from ....domain.repositories import VolunteerRepository
from .volunteer_results import ActivityListResult


class ListActivitiesUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, status: ActivityStatus | None = None) -> ActivityListResult:
        return ActivityListResult(activities=self._volunteers.list_activities(status))
