"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio

Responsabilidades:
    - Centralizar exports de entidades, puertos y política de sorteo.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import (
    ActivityStatus,
    AnnouncementPost,
    RegistrationStatus,
    VolunteerActivity,
    VolunteerRegistration,
    build_draw_announcement,
)
from .lottery_policy import DrawOutcome, draw, priority_score, rank_candidates
from .repositories import UserRepository, VolunteerRepository

__all__ = [
    # Entities
    "ActivityStatus",
    "AnnouncementPost",
    "RegistrationStatus",
    "VolunteerActivity",
    "VolunteerRegistration",
    "build_draw_announcement",
    # Lottery policy
    "DrawOutcome",
    "draw",
    "priority_score",
    "rank_candidates",
    # Ports
    "UserRepository",
    "VolunteerRepository",
]
