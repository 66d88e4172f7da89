"""
===============================================================================
USE CASE: Register For Activity
===============================================================================

Name:
    Register For Activity Use Case

Business Goal:
    Registrar la postulación de un empleado a una actividad abierta. El cupo
    NO se controla acá: la sobre-suscripción es esperada y la resuelve el
    sorteo.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    RegisterForActivityUseCase

Responsibilities:
    - Validar employee_id (requerido, recortado).
    - Validar actividad: existe, `open`, plazo no vencido.
    - Rechazar duplicados (misma actividad + mismo employee_id).
    - Crear la inscripción `pending` con el nickname de la sesión.

Collaborators:
    - VolunteerRepository (get_activity, find_registration, create_registration)
    - crosscutting.clock (today / now)

-------------------------------------------------------------------------------
Error Mapping:
    - VALIDATION_ERROR: employee_id vacío
    - NOT_FOUND: actividad inexistente
    - CONFLICT: actividad cerrada, plazo vencido, inscripción duplicada
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.clock import Clock, today
from ....crosscutting.logger import logger
from ....domain.entities import RegistrationStatus, VolunteerRegistration
from ....domain.repositories import VolunteerRepository
from .volunteer_results import (
    ACTIVITY_NOT_FOUND_MESSAGE,
    RegistrationResult,
    VolunteerError,
    VolunteerErrorCode,
)

EMPLOYEE_ID_REQUIRED_MESSAGE = "사번을 입력해주세요."
ACTIVITY_CLOSED_MESSAGE = "모집이 마감된 봉사활동입니다."
DEADLINE_PASSED_MESSAGE = "신청 기간이 지난 봉사활동입니다."
ALREADY_REGISTERED_MESSAGE = "이미 신청한 봉사활동입니다."


class RegisterForActivityUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository, clock: Clock) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock

    def execute(
        self, activity_id: int, employee_id: str, user_name: str
    ) -> RegistrationResult:
        employee_id = (employee_id or "").strip()
        if not employee_id:
            return self._error(
                VolunteerErrorCode.VALIDATION_ERROR, EMPLOYEE_ID_REQUIRED_MESSAGE
            )

        activity = self._volunteers.get_activity(activity_id)
        if activity is None:
            return self._error(VolunteerErrorCode.NOT_FOUND, ACTIVITY_NOT_FOUND_MESSAGE)
        if not activity.is_open:
            return self._error(VolunteerErrorCode.CONFLICT, ACTIVITY_CLOSED_MESSAGE)
        if activity.deadline is not None and activity.deadline < today(self._clock):
            return self._error(VolunteerErrorCode.CONFLICT, DEADLINE_PASSED_MESSAGE)

        if self._volunteers.find_registration(activity_id, employee_id) is not None:
            return self._error(VolunteerErrorCode.CONFLICT, ALREADY_REGISTERED_MESSAGE)

        registration = self._volunteers.create_registration(
            VolunteerRegistration(
                id=None,
                activity_id=activity_id,
                employee_id=employee_id,
                user_name=user_name,
                created_at=self._clock.now(),
                status=RegistrationStatus.PENDING,
            )
        )
        logger.info(
            "inscripción creada",
            extra={"activity_id": activity_id, "registration_id": registration.id},
        )
        return RegistrationResult(registration=registration)

    @staticmethod
    def _error(code: VolunteerErrorCode, message: str) -> RegistrationResult:
        return RegistrationResult(error=VolunteerError(code=code, message=message))
