"""
===============================================================================
LOTTERY USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Lottery Use Case Results

Business Goal:
    Modelos compartidos de resultado para el sorteo programado y el
    "publicar y sortear" manual, con la forma JSON que consume el cliente
    (camelCase, `success: true`).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    lottery_results models (module)

Responsibilities:
    - ActivityDrawResult: detalle por actividad (sorteada u omitida).
    - LotteryRunResult: resumen de una corrida programada (3 formas).
    - PublishActivityResult + LotteryError: resultado del camino manual.

Collaborators:
    - draw_activity / run_scheduled_lottery / publish_activity
    - api.lottery_routes (serializa con to_dict)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

SKIP_REASON_NO_PENDING = "pending 신청자 없음"
SKIP_REASON_ALREADY_CLOSED = "이미 마감된 봉사활동"
NO_DUE_ACTIVITIES_MESSAGE = "오늘 마감되는 모집중 봉사활동이 없습니다."


class LotteryErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class LotteryError:
    code: LotteryErrorCode
    message: str


@dataclass(frozen=True)
class ActivityDrawResult:
    """
    Detalle por actividad.

    Contrato:
      - skipped=False => winners/rejected/max_participants válidos.
      - skipped=True  => reason explica por qué no hubo cambios.
    """

    activity_id: int
    title: str
    winners: int = 0
    rejected: int = 0
    max_participants: int = 0
    skipped: bool = False
    reason: str | None = None

    @property
    def processed_registrations(self) -> int:
        return 0 if self.skipped else self.winners + self.rejected

    def to_dict(self) -> dict[str, Any]:
        if self.skipped:
            return {
                "activityId": self.activity_id,
                "title": self.title,
                "skipped": True,
                "reason": self.reason,
            }
        return {
            "activityId": self.activity_id,
            "title": self.title,
            "winners": self.winners,
            "rejected": self.rejected,
            "maxParticipants": self.max_participants,
        }


@dataclass
class LotteryRunResult:
    """
    Resumen de una corrida programada.

    Formas:
      - skipped (fuera de hora): reason + kstDate
      - sin actividades elegibles: message con contadores en 0
      - corrida completa: contadores + details
    """

    kst_date: str
    processed_activities: int = 0
    processed_registrations: int = 0
    details: List[ActivityDrawResult] = field(default_factory=list)
    skipped: bool = False
    reason: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.skipped:
            return {
                "success": True,
                "skipped": True,
                "reason": self.reason,
                "kstDate": self.kst_date,
            }
        if self.message is not None:
            return {
                "success": True,
                "processedActivities": 0,
                "processedRegistrations": 0,
                "message": self.message,
            }
        return {
            "success": True,
            "kstDate": self.kst_date,
            "processedActivities": self.processed_activities,
            "processedRegistrations": self.processed_registrations,
            "details": [d.to_dict() for d in self.details],
        }


@dataclass
class PublishActivityResult:
    detail: ActivityDrawResult | None = None
    error: LotteryError | None = None
