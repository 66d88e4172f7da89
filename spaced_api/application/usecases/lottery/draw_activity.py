"""
===============================================================================
USE CASE: Draw Activity (algoritmo por actividad)
===============================================================================

Name:
    Draw Activity Use Case

Business Goal:
    Decidir y publicar el resultado del sorteo de UNA actividad, compartido por
    el camino programado (cron) y el manual (admin).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DrawActivityUseCase

Responsibilities:
    - Omitir actividades sin pendientes (sin cambios de estado).
    - Aplicar lottery_policy.draw (cupo + prioridad).
    - Publicar atómicamente: cierre CAS, estados, anuncio.
    - Tratar un CAS perdido como "ya procesada" (omitida).
    - Registrar métricas y logs del resultado.

Collaborators:
    - VolunteerRepository.publish_draw_result
    - domain.lottery_policy.draw
    - domain.entities.build_draw_announcement
    - crosscutting.clock.Clock (published_at)
===============================================================================
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ....crosscutting.clock import Clock
from ....crosscutting.logger import logger
from ....crosscutting.metrics import (
    record_lottery_activity,
    record_lottery_registrations,
)
from ....domain.entities import (
    VolunteerActivity,
    VolunteerRegistration,
    build_draw_announcement,
)
from ....domain.lottery_policy import draw
from ....domain.repositories import VolunteerRepository
from .lottery_results import (
    SKIP_REASON_ALREADY_CLOSED,
    SKIP_REASON_NO_PENDING,
    ActivityDrawResult,
)


class DrawActivityUseCase:
    def __init__(self, volunteer_repository: VolunteerRepository, clock: Clock) -> None:
        self._volunteers = volunteer_repository
        self._clock = clock

    def execute(
        self,
        activity: VolunteerActivity,
        pending: Sequence[VolunteerRegistration],
        confirmed_counts: Mapping[str, int],
        *,
        trigger: str,
    ) -> ActivityDrawResult:
        if not pending:
            record_lottery_activity(trigger, "skipped_empty")
            return ActivityDrawResult(
                activity_id=activity.id,
                title=activity.title,
                skipped=True,
                reason=SKIP_REASON_NO_PENDING,
            )

        outcome = draw(pending, activity.capacity, confirmed_counts)

        published = self._volunteers.publish_draw_result(
            activity.id,
            outcome.winner_ids,
            outcome.loser_ids,
            self._clock.now(),
            build_draw_announcement(activity),
        )
        if not published:
            logger.warning(
                "sorteo omitido: actividad ya cerrada",
                extra={"activity_id": activity.id, "trigger": trigger},
            )
            record_lottery_activity(trigger, "skipped_closed")
            return ActivityDrawResult(
                activity_id=activity.id,
                title=activity.title,
                skipped=True,
                reason=SKIP_REASON_ALREADY_CLOSED,
            )

        record_lottery_activity(trigger, "drawn")
        record_lottery_registrations("confirmed", len(outcome.winners))
        record_lottery_registrations("rejected", len(outcome.losers))
        logger.info(
            "sorteo publicado",
            extra={
                "activity_id": activity.id,
                "trigger": trigger,
                "winners": len(outcome.winners),
                "rejected": len(outcome.losers),
                "max_participants": activity.capacity,
            },
        )
        return ActivityDrawResult(
            activity_id=activity.id,
            title=activity.title,
            winners=len(outcome.winners),
            rejected=len(outcome.losers),
            max_participants=activity.capacity,
        )
