"""
===============================================================================
USE CASE: Delete Activity
===============================================================================

Class:
    DeleteActivityUseCase

Responsibilities:
    - Borrar una actividad (en cualquier estado) junto con sus inscripciones.
    - Los anuncios ya publicados en el feed se conservan.

Collaborators:
    - VolunteerRepository.delete_activity
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ACTIVITY_NOT_FOUND_MESSAGE,
    ActivityDeletionResult,
    VolunteerError,
    VolunteerErrorCode,
)


class DeleteActivityUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, activity_id: int) -> ActivityDeletionResult:
        if not self._volunteers.delete_activity(activity_id):
            return ActivityDeletionResult(
                activity_id=activity_id,
                error=VolunteerError(
                    code=VolunteerErrorCode.NOT_FOUND,
                    message=ACTIVITY_NOT_FOUND_MESSAGE,
                ),
            )
        logger.info("actividad borrada", extra={"activity_id": activity_id})
        return ActivityDeletionResult(activity_id=activity_id)
