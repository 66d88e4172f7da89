"""
===============================================================================
USE CASE: Unpublish Activity
===============================================================================

Class:
    UnpublishActivityUseCase

Responsibilities:
    - Quitar la publicación del resultado (is_published=false, published_at=null).
    - NO reabrir: el estado `closed` se mantiene y un nuevo sorteo no es posible.

Collaborators:
    - VolunteerRepository.unpublish_activity
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ACTIVITY_NOT_FOUND_MESSAGE,
    ActivityResult,
    VolunteerError,
    VolunteerErrorCode,
)


class UnpublishActivityUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository) -> None:
        self._volunteers = volunteer_repository

    def execute(self, activity_id: int) -> ActivityResult:
        updated = self._volunteers.unpublish_activity(activity_id)
        if updated is None:
            return ActivityResult(
                error=VolunteerError(
                    code=VolunteerErrorCode.NOT_FOUND,
                    message=ACTIVITY_NOT_FOUND_MESSAGE,
                )
            )
        logger.info("actividad despublicada", extra={"activity_id": activity_id})
        return ActivityResult(activity=updated)
