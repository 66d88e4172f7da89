"""
===============================================================================
USE CASE: Run Scheduled Lottery (cron)
===============================================================================

Name:
    Run Scheduled Lottery Use Case

Business Goal:
    Sortear, una vez al día, todas las actividades abiertas cuyo plazo vence
    hoy (fecha calendario en la zona del sorteo).

Why (Context / Intención):
    - La hora del día actúa de gate (salvo force); la fecha siempre aplica.
    - Re-ejecutar el mismo día no reprocesa nada: las actividades ya cerradas
      dejan de cumplir `status = open`.
    - Una falla de datos aborta la corrida entera; lo ya publicado en
      iteraciones previas queda publicado.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    RunScheduledLotteryUseCase

Responsibilities:
    - Gate horario (run_hour) con bypass force.
    - Cargar actividades elegibles, pendientes y puntajes del año (una vez).
    - Procesar secuencialmente cada actividad vía DrawActivityUseCase.
    - Acumular contadores y detalles.

Collaborators:
    - VolunteerRepository
    - DrawActivityUseCase
    - crosscutting.clock (date_key, year_bounds)
===============================================================================
"""

from __future__ import annotations

import time

from ....crosscutting.clock import Clock, date_key, year_bounds
from ....crosscutting.logger import logger
from ....crosscutting.metrics import observe_lottery_run_duration
from ....domain.repositories import VolunteerRepository
from .draw_activity import DrawActivityUseCase
from .lottery_results import NO_DUE_ACTIVITIES_MESSAGE, LotteryRunResult

TRIGGER_CRON = "cron"


class RunScheduledLotteryUseCase:
    def __init__(
        self,
        volunteer_repository: VolunteerRepository,
        clock: Clock,
        draw_activity: DrawActivityUseCase,
        *,
        run_hour: int = 9,
    ) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock
        self._draw = draw_activity
        self._run_hour = run_hour

    def execute(self, *, force: bool = False) -> LotteryRunResult:
        now = self._clock.now()
        today_key = date_key(now)

        # ---------------------------------------------------------------------
        # 1) Gate horario.
        # ---------------------------------------------------------------------
        if not force and now.hour != self._run_hour:
            logger.info(
                "sorteo programado fuera de hora",
                extra={"hour": now.hour, "run_hour": self._run_hour},
            )
            return LotteryRunResult(
                kst_date=today_key,
                skipped=True,
                reason=f"현재 KST {now.hour:02d}시 (자동 추첨 시간 아님)",
            )

        started = time.perf_counter()

        # ---------------------------------------------------------------------
        # 2) Actividades abiertas que vencen hoy.
        # ---------------------------------------------------------------------
        activities = self._volunteers.list_open_activities_due(now.date())
        if not activities:
            logger.info("sorteo programado sin actividades", extra={"date": today_key})
            return LotteryRunResult(kst_date=today_key, message=NO_DUE_ACTIVITIES_MESSAGE)

        # ---------------------------------------------------------------------
        # 3) Pendientes + puntajes de prioridad (una sola lectura por corrida).
        # ---------------------------------------------------------------------
        pending = self._volunteers.list_pending_registrations(
            [a.id for a in activities]
        )
        employee_ids = sorted({r.employee_id for r in pending if r.employee_id})
        start, end = year_bounds(self._clock)
        confirmed_counts = (
            self._volunteers.count_confirmed_by_employee(employee_ids, start, end)
            if employee_ids
            else {}
        )

        # ---------------------------------------------------------------------
        # 4) Loop secuencial (el orden es el del repositorio).
        # ---------------------------------------------------------------------
        result = LotteryRunResult(kst_date=today_key)
        for activity in activities:
            candidates = [r for r in pending if r.activity_id == activity.id]
            detail = self._draw.execute(
                activity, candidates, confirmed_counts, trigger=TRIGGER_CRON
            )
            result.details.append(detail)
            if not detail.skipped:
                result.processed_activities += 1
                result.processed_registrations += detail.processed_registrations

        elapsed = time.perf_counter() - started
        observe_lottery_run_duration(TRIGGER_CRON, elapsed)
        logger.info(
            "sorteo programado completado",
            extra={
                "date": today_key,
                "forced": force,
                "processed_activities": result.processed_activities,
                "processed_registrations": result.processed_registrations,
                "candidates": len(activities),
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        return result
