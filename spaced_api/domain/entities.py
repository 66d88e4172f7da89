"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (VolunteerActivity, VolunteerRegistration, AnnouncementPost)

Responsabilidades:
    - Definir estructuras centrales del voluntariado (sin infraestructura).
    - Brindar helpers mínimos para mantener invariantes simples
      (estados, formato del anuncio de sorteo).
    - Mantener tipos claros para casos de uso y repositorios.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - domain.lottery_policy: ordena/decide sobre VolunteerRegistration.
    - application/usecases: construyen/consumen estas entidades.
    - api: serializan DTOs basados en estas entidades.

Principios:
    - Sin dependencias a DB/Redis/FastAPI.
    - open -> closed es unidireccional; no hay camino de reapertura.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

ANNOUNCEMENT_AUTHOR = "admin"
ANNOUNCEMENT_POST_TYPE = "volunteer"
EMPTY_DATE_LABEL = "00월 00일"


class ActivityStatus(str, Enum):
    """Estado de reclutamiento de una actividad."""

    OPEN = "open"
    CLOSED = "closed"


class RegistrationStatus(str, Enum):
    """Estado de una inscripción (decidido una sola vez por el sorteo)."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# VolunteerActivity
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VolunteerActivity:
    """
    Actividad de voluntariado que recluta participantes.

    Importante:
      - `deadline` se compara por fecha calendario en la zona del sorteo.
      - `unpublish` no toca `status` (nunca se reabre).
    """

    id: int | None
    title: str
    description: str = ""
    date: date | None = None
    deadline: date | None = None
    max_participants: int = 0
    status: ActivityStatus = ActivityStatus.OPEN
    is_published: bool = False
    published_at: datetime | None = None
    location: str = ""
    created_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status == ActivityStatus.OPEN

    @property
    def capacity(self) -> int:
        """Cupo efectivo (valores negativos cuentan como 0)."""
        return max(0, int(self.max_participants or 0))


# ---------------------------------------------------------------------------
# VolunteerRegistration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VolunteerRegistration:
    """Postulación de un empleado a una actividad."""

    id: int | None
    activity_id: int
    employee_id: str
    user_name: str
    created_at: datetime
    status: RegistrationStatus = RegistrationStatus.PENDING


# ---------------------------------------------------------------------------
# AnnouncementPost
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AnnouncementPost:
    """Entrada del feed creada como efecto de un sorteo exitoso."""

    content: str
    author_nickname: str = ANNOUNCEMENT_AUTHOR
    is_admin: bool = True
    post_type: str = ANNOUNCEMENT_POST_TYPE
    id: int | None = None
    created_at: datetime | None = None


def format_activity_date_label(activity_date: date | None) -> str:
    """`MM월 DD일` o el placeholder `00월 00일` si no hay fecha."""
    if activity_date is None:
        return EMPTY_DATE_LABEL
    return f"{activity_date.month:02d}월 {activity_date.day:02d}일"


def build_draw_announcement(activity: VolunteerActivity) -> AnnouncementPost:
    label = format_activity_date_label(activity.date)
    return AnnouncementPost(
        content=f"{activity.title} 의 추첨이 완료되었습니다.\n - 봉사활동 일자 : {label}"
    )


def mask_display_name(name: str) -> str:
    """
    Nombre público de un ganador: primera letra, `*`, última letra.

    `김철수` -> `김*수`, `이영` -> `이*`; uno o ningún carácter se devuelve tal cual.
    """
    if not name or len(name) < 2:
        return name
    if len(name) == 2:
        return f"{name[0]}*"
    return f"{name[0]}*{name[-1]}"
