"""
===============================================================================
USE CASE: Create Activity
===============================================================================

Name:
    Create Activity Use Case

Business Goal:
    Dar de alta una actividad de voluntariado abierta a inscripciones.

Why (Context / Intención):
    - La actividad nace `open` y sin publicar; solo el sorteo la cierra.
    - Si no se indica plazo, vence hoy (fecha en la zona del sorteo), con lo
      que el cron del día la procesa.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateActivityUseCase

Responsibilities:
    - Normalizar/validar título y cupo.
    - Resolver el plazo por defecto con el Clock.
    - Persistir vía VolunteerRepository.create_activity.

Collaborators:
    - VolunteerRepository
    - crosscutting.clock (today)
    - volunteer_results
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ....crosscutting.clock import Clock, today
from ....crosscutting.logger import logger
from ....domain.entities import ActivityStatus, VolunteerActivity
from ....domain.repositories import VolunteerRepository
from .volunteer_results import ActivityResult, VolunteerError, VolunteerErrorCode

TITLE_REQUIRED_MESSAGE = "제목을 입력해주세요."
INVALID_CAPACITY_MESSAGE = "모집 인원은 0 이상이어야 합니다."


@dataclass(frozen=True)
class CreateActivityInput:
    title: str
    description: str = ""
    date: date | None = None
    deadline: date | None = None
    max_participants: int = 0
    location: str = ""


class CreateActivityUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository, clock: Clock) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock

    def execute(self, input_data: CreateActivityInput) -> ActivityResult:
        title = (input_data.title or "").strip()
        if not title:
            return self._validation_error(TITLE_REQUIRED_MESSAGE)
        if input_data.max_participants < 0:
            return self._validation_error(INVALID_CAPACITY_MESSAGE)

        activity = VolunteerActivity(
            id=None,
            title=title,
            description=(input_data.description or "").strip(),
            date=input_data.date,
            deadline=input_data.deadline or today(self._clock),
            max_participants=input_data.max_participants,
            status=ActivityStatus.OPEN,
            is_published=False,
            location=(input_data.location or "").strip(),
            created_at=self._clock.now(),
        )
        created = self._volunteers.create_activity(activity)
        logger.info(
            "actividad creada",
            extra={"activity_id": created.id, "deadline": str(created.deadline)},
        )
        return ActivityResult(activity=created)

    @staticmethod
    def _validation_error(message: str) -> ActivityResult:
        return ActivityResult(
            error=VolunteerError(code=VolunteerErrorCode.VALIDATION_ERROR, message=message)
        )
