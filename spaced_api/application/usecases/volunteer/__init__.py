"""
===============================================================================
VOLUNTEER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Responsibilities:
    - Re-exportar casos de uso de actividades/inscripciones/ganadores, DTOs y
      errores.
===============================================================================
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Use Cases
# -----------------------------------------------------------------------------
from .create_activity import CreateActivityInput, CreateActivityUseCase
from .delete_activity import DeleteActivityUseCase
from .list_activities import ListActivitiesUseCase
from .list_activity_registrations import ListActivityRegistrationsUseCase
from .list_my_registrations import ListMyRegistrationsUseCase
from .list_winners import ListWinnersUseCase
from .register_for_activity import RegisterForActivityUseCase
from .unpublish_activity import UnpublishActivityUseCase
from .volunteer_stats import VolunteerStatsUseCase

# -----------------------------------------------------------------------------
# Results / Errors
# -----------------------------------------------------------------------------
from .volunteer_results import (
    ActivityDeletionResult,
    ActivityListResult,
    ActivityResult,
    ParticipationCount,
    ParticipationStatsResult,
    RegistrationListResult,
    RegistrationResult,
    VolunteerError,
    VolunteerErrorCode,
    Winner,
    WinnerListResult,
)

__all__ = [
    "CreateActivityInput",
    "CreateActivityUseCase",
    "DeleteActivityUseCase",
    "ListActivitiesUseCase",
    "ListActivityRegistrationsUseCase",
    "ListMyRegistrationsUseCase",
    "ListWinnersUseCase",
    "RegisterForActivityUseCase",
    "UnpublishActivityUseCase",
    "VolunteerStatsUseCase",
    "ActivityDeletionResult",
    "ActivityListResult",
    "ActivityResult",
    "ParticipationCount",
    "ParticipationStatsResult",
    "RegistrationListResult",
    "RegistrationResult",
    "VolunteerError",
    "VolunteerErrorCode",
    "Winner",
    "WinnerListResult",
]
