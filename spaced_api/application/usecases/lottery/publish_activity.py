"""
===============================================================================
USE CASE: Publish Activity (sorteo manual del admin)
===============================================================================

Name:
    Publish Activity Use Case

Business Goal:
    Permitir que un admin "publique y sortee" una actividad concreta sin
    esperar al cron, sin importar su plazo.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    PublishActivityUseCase

Responsibilities:
    - Validar existencia (NOT_FOUND) y estado open (CONFLICT).
    - Cargar pendientes y puntajes del año de esa actividad.
    - Delegar el algoritmo en DrawActivityUseCase.
    - Traducir un CAS perdido (corrida concurrente) a CONFLICT.

Collaborators:
    - VolunteerRepository
    - DrawActivityUseCase
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.clock import Clock, year_bounds
from ....domain.repositories import VolunteerRepository
from .draw_activity import DrawActivityUseCase
from .lottery_results import (
    SKIP_REASON_ALREADY_CLOSED,
    LotteryError,
    LotteryErrorCode,
    PublishActivityResult,
)

TRIGGER_ADMIN = "admin"

ACTIVITY_NOT_FOUND_MESSAGE = "봉사활동을 찾을 수 없습니다."
ACTIVITY_CLOSED_MESSAGE = "이미 추첨이 완료된 봉사활동입니다."


class PublishActivityUseCase:
    def __init__(
        self,
        volunteer_repository: VolunteerRepository,
        clock: Clock,
        draw_activity: DrawActivityUseCase,
    ) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock
        self._draw = draw_activity

    def execute(self, activity_id: int) -> PublishActivityResult:
        activity = self._volunteers.get_activity(activity_id)
        if activity is None:
            return self._error(LotteryErrorCode.NOT_FOUND, ACTIVITY_NOT_FOUND_MESSAGE)
        if not activity.is_open:
            return self._error(LotteryErrorCode.CONFLICT, ACTIVITY_CLOSED_MESSAGE)

        pending = self._volunteers.list_pending_registrations([activity.id])
        employee_ids = sorted({r.employee_id for r in pending if r.employee_id})
        start, end = year_bounds(self._clock)
        confirmed_counts = (
            self._volunteers.count_confirmed_by_employee(employee_ids, start, end)
            if employee_ids
            else {}
        )

        detail = self._draw.execute(
            activity, pending, confirmed_counts, trigger=TRIGGER_ADMIN
        )
        if detail.skipped and detail.reason == SKIP_REASON_ALREADY_CLOSED:
            return self._error(LotteryErrorCode.CONFLICT, ACTIVITY_CLOSED_MESSAGE)

        return PublishActivityResult(detail=detail)

    @staticmethod
    def _error(code: LotteryErrorCode, message: str) -> PublishActivityResult:
        return PublishActivityResult(error=LotteryError(code=code, message=message))
