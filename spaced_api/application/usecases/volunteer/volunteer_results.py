"""
===============================================================================
VOLUNTEER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Volunteer Use Case Results

Business Goal:
    Resultados tipados y errores estables para la gestión de actividades e
    inscripciones (crear, listar, postular, despublicar, borrar, ganadores, estadísticas).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    volunteer_results models (module)

Responsibilities:
    - VolunteerErrorCode / VolunteerError: catálogo estable de errores.
    - ActivityResult / ActivityListResult: salida de casos sobre actividades.
    - RegistrationResult / RegistrationListResult: salida sobre inscripciones.
    - ParticipationStatsResult: vista de puntajes de prioridad por año.
    - WinnerListResult: ganadores publicados con nombre enmascarado.
    - ActivityDeletionResult: salida del borrado de una actividad.

Collaborators:
    - Casos de uso del paquete volunteer
    - api.volunteer_routes (mapea VolunteerErrorCode -> HTTP)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ....domain.entities import VolunteerActivity, VolunteerRegistration

ACTIVITY_NOT_FOUND_MESSAGE = "봉사활동을 찾을 수 없습니다."
RESULT_NOT_PUBLISHED_MESSAGE = "발표된 당첨 결과가 없습니다."


class VolunteerErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class VolunteerError:
    code: VolunteerErrorCode
    message: str


@dataclass
class ActivityResult:
    activity: VolunteerActivity | None = None
    error: VolunteerError | None = None


@dataclass
class ActivityListResult:
    activities: List[VolunteerActivity] = field(default_factory=list)
    error: VolunteerError | None = None


@dataclass
class RegistrationResult:
    registration: VolunteerRegistration | None = None
    error: VolunteerError | None = None


@dataclass
class RegistrationListResult:
    registrations: List[VolunteerRegistration] = field(default_factory=list)
    error: VolunteerError | None = None


@dataclass(frozen=True)
class ParticipationCount:
    employee_id: str
    confirmed: int


@dataclass
class ParticipationStatsResult:
    year: int
    entries: List[ParticipationCount] = field(default_factory=list)
    error: VolunteerError | None = None


@dataclass(frozen=True)
class Winner:
    registration_id: int
    masked_name: str


@dataclass
class WinnerListResult:
    activity: VolunteerActivity | None = None
    winners: List[Winner] = field(default_factory=list)
    error: VolunteerError | None = None


@dataclass
class ActivityDeletionResult:
    activity_id: int
    error: VolunteerError | None = None
