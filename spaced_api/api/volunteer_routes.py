"""
===============================================================================
TARJETA CRC — spaced_api/api/volunteer_routes.py (Actividades e Inscripciones)
===============================================================================

Responsabilidades:
  - Endpoints de participante: listar actividades, postularse, mis inscripciones,
    ganadores publicados (nombres enmascarados).
  - Endpoints de admin: crear y borrar actividades, ver inscriptos, despublicar,
    estadísticas anuales.
  - Serializar entidades al contrato camelCase del cliente.

Colaboradores:
  - application.usecases.volunteer (casos de uso)
  - identity.sessions (require_user_session / require_admin_session)
  - crosscutting.error_responses (factories de error)
===============================================================================
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from ..application.usecases.volunteer import (
    CreateActivityInput,
    CreateActivityUseCase,
    DeleteActivityUseCase,
    ListActivitiesUseCase,
    ListActivityRegistrationsUseCase,
    ListMyRegistrationsUseCase,
    ListWinnersUseCase,
    RegisterForActivityUseCase,
    UnpublishActivityUseCase,
    VolunteerError,
    VolunteerErrorCode,
    VolunteerStatsUseCase,
)
from ..container import (
    get_create_activity_use_case,
    get_delete_activity_use_case,
    get_list_activities_use_case,
    get_list_activity_registrations_use_case,
    get_list_my_registrations_use_case,
    get_list_winners_use_case,
    get_register_for_activity_use_case,
    get_unpublish_activity_use_case,
    get_volunteer_stats_use_case,
)
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    bad_request,
    conflict,
    internal_error,
    not_found,
)
from ..domain.entities import ActivityStatus, VolunteerActivity, VolunteerRegistration
from ..identity.sessions import Session, require_admin_session, require_user_session

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class CreateActivityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=5000)
    activity_date: date | None = Field(default=None, alias="date")
    deadline: date | None = None
    max_participants: int = Field(default=0, alias="maxParticipants")
    location: str = Field(default="", max_length=200)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: str | None = Field(default=None, alias="employeeId", max_length=50)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _raise_for_volunteer_error(error: VolunteerError) -> None:
    if error.code == VolunteerErrorCode.VALIDATION_ERROR:
        raise bad_request(error.message)
    if error.code == VolunteerErrorCode.NOT_FOUND:
        raise not_found(error.message)
    if error.code == VolunteerErrorCode.CONFLICT:
        raise conflict(error.message)
    raise internal_error()


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_activity_dict(activity: VolunteerActivity) -> dict:
    return {
        "id": activity.id,
        "title": activity.title,
        "description": activity.description,
        "date": _iso(activity.date),
        "deadline": _iso(activity.deadline),
        "maxParticipants": activity.max_participants,
        "status": activity.status.value,
        "isPublished": activity.is_published,
        "publishedAt": _iso(activity.published_at),
        "location": activity.location,
        "createdAt": _iso(activity.created_at),
    }


def _to_registration_dict(registration: VolunteerRegistration) -> dict:
    return {
        "id": registration.id,
        "activityId": registration.activity_id,
        "employeeId": registration.employee_id,
        "userName": registration.user_name,
        "status": registration.status.value,
        "createdAt": _iso(registration.created_at),
    }


# -----------------------------------------------------------------------------
# Participante
# -----------------------------------------------------------------------------


@router.get("/volunteer/activities", tags=["volunteer"])
def list_activities(
    status: ActivityStatus | None = Query(default=None),
    _session: Session = Depends(require_user_session),
    use_case: ListActivitiesUseCase = Depends(get_list_activities_use_case),
):
    result = use_case.execute(status)
    return {
        "success": True,
        "activities": [_to_activity_dict(a) for a in result.activities],
    }


@router.post(
    "/volunteer/activities/{activity_id}/registrations",
    status_code=201,
    tags=["volunteer"],
)
def register_for_activity(
    activity_id: int,
    req: RegisterRequest,
    session: Session = Depends(require_user_session),
    use_case: RegisterForActivityUseCase = Depends(get_register_for_activity_use_case),
):
    """Postulación (queda `pending`; el cupo lo resuelve el sorteo)."""
    result = use_case.execute(activity_id, req.employee_id or "", session.nickname)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {
        "success": True,
        "registration": _to_registration_dict(result.registration),
    }


@router.get("/volunteer/registrations/me", tags=["volunteer"])
def list_my_registrations(
    session: Session = Depends(require_user_session),
    use_case: ListMyRegistrationsUseCase = Depends(get_list_my_registrations_use_case),
):
    result = use_case.execute(session.nickname)
    return {
        "success": True,
        "registrations": [_to_registration_dict(r) for r in result.registrations],
    }


@router.get("/volunteer/activities/{activity_id}/winners", tags=["volunteer"])
def list_winners(
    activity_id: int,
    _session: Session = Depends(require_user_session),
    use_case: ListWinnersUseCase = Depends(get_list_winners_use_case),
):
    """Ganadores de un resultado publicado; solo el nombre enmascarado."""
    result = use_case.execute(activity_id)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {
        "success": True,
        "activity": _to_activity_dict(result.activity),
        "winners": [
            {"id": w.registration_id, "userName": w.masked_name}
            for w in result.winners
        ],
    }


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------


@router.post("/admin/volunteer/activities", status_code=201, tags=["admin"])
def create_activity(
    req: CreateActivityRequest,
    _session: Session = Depends(require_admin_session),
    use_case: CreateActivityUseCase = Depends(get_create_activity_use_case),
):
    result = use_case.execute(
        CreateActivityInput(
            title=req.title,
            description=req.description,
            date=req.activity_date,
            deadline=req.deadline,
            max_participants=req.max_participants,
            location=req.location,
        )
    )
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {"success": True, "activity": _to_activity_dict(result.activity)}


@router.post("/admin/volunteer/activities/{activity_id}/unpublish", tags=["admin"])
def unpublish_activity(
    activity_id: int,
    _session: Session = Depends(require_admin_session),
    use_case: UnpublishActivityUseCase = Depends(get_unpublish_activity_use_case),
):
    result = use_case.execute(activity_id)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {"success": True, "activity": _to_activity_dict(result.activity)}


@router.get("/volunteer/activities/{activity_id}/registrations", tags=["admin"])
def list_activity_registrations(
    activity_id: int,
    _session: Session = Depends(require_admin_session),
    use_case: ListActivityRegistrationsUseCase = Depends(
        get_list_activity_registrations_use_case
    ),
):
    """Inscriptos de una actividad en cualquier estado (más antiguos primero)."""
    result = use_case.execute(activity_id)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {
        "success": True,
        "registrations": [_to_registration_dict(r) for r in result.registrations],
    }


@router.delete("/volunteer/activities/{activity_id}", tags=["admin"])
def delete_activity(
    activity_id: int,
    _session: Session = Depends(require_admin_session),
    use_case: DeleteActivityUseCase = Depends(get_delete_activity_use_case),
):
    """Borra la actividad con sus inscripciones."""
    result = use_case.execute(activity_id)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {"success": True, "id": result.activity_id}


@router.get("/admin/volunteer/stats", tags=["admin"])
def volunteer_stats(
    year: int | None = Query(default=None),
    _session: Session = Depends(require_admin_session),
    use_case: VolunteerStatsUseCase = Depends(get_volunteer_stats_use_case),
):
    """Participaciones confirmadas por empleado en el año (puntaje de prioridad)."""
    result = use_case.execute(year)
    if result.error is not None:
        _raise_for_volunteer_error(result.error)
    return {
        "success": True,
        "year": result.year,
        "stats": [
            {"employeeId": e.employee_id, "confirmed": e.confirmed}
            for e in result.entries
        ],
    }
