"""
===============================================================================
TARJETA CRC — spaced_api/api/lottery_routes.py (Sorteo programado + manual)
===============================================================================

Responsabilidades:
  - Exponer el endpoint del cron (GET/POST) protegido por Bearer CRON_SECRET.
  - Exponer el "publicar y sortear" manual para admins.
  - Traducir resultados/errores de los casos de uso a HTTP.

Colaboradores:
  - application.usecases.lottery (RunScheduled / PublishActivity)
  - identity.passwords.constant_time_equals (comparación del secreto)
  - identity.sessions.require_admin_session
  - crosscutting.error_responses (factories de error)

Notas:
  - El endpoint del cron no usa cookies: su CORS es abierto (`*`) y lo
    resuelve OriginGuardMiddleware (open_paths).
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from ..application.usecases.lottery import (
    LotteryError,
    LotteryErrorCode,
    PublishActivityUseCase,
    RunScheduledLotteryUseCase,
)
from ..container import (
    get_publish_activity_use_case,
    get_run_scheduled_lottery_use_case,
)
from ..context import set_lottery_trigger
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    AppHTTPException,
    conflict,
    internal_error,
    not_found,
    unauthorized,
)
from ..crosscutting.exceptions import ConfigurationError, SpacedError
from ..crosscutting.logger import logger
from ..identity.passwords import constant_time_equals
from ..identity.sessions import Session, require_admin_session

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

AUTO_LOTTERY_PATH = "/volunteer-auto-lottery"
BEARER_PREFIX = "Bearer "

MISSING_CRON_SECRET_MESSAGE = "CRON_SECRET 환경변수가 없습니다."
LOTTERY_FAILED_MESSAGE = "자동 추첨 처리 중 오류가 발생했습니다."


def _raise_for_lottery_error(error: LotteryError) -> None:
    if error.code == LotteryErrorCode.NOT_FOUND:
        raise not_found(error.message)
    if error.code == LotteryErrorCode.CONFLICT:
        raise conflict(error.message)
    raise internal_error()


def require_cron_secret(request: Request) -> None:
    """500 si falta CRON_SECRET; 401 si el token Bearer (sin espacios) no coincide."""
    secret = get_settings().cron_secret
    if not secret:
        raise ConfigurationError(MISSING_CRON_SECRET_MESSAGE)

    header = request.headers.get("authorization") or ""
    token = header[len(BEARER_PREFIX):].strip() if header.startswith(BEARER_PREFIX) else ""
    if not token or not constant_time_equals(token.encode("utf-8"), secret.encode("utf-8")):
        logger.warning("sorteo programado: credencial inválida")
        raise unauthorized()


@router.api_route(
    AUTO_LOTTERY_PATH,
    methods=["GET", "POST"],
    tags=["lottery"],
    dependencies=[Depends(require_cron_secret)],
)
def run_auto_lottery(
    force: str | None = Query(default=None),
    use_case: RunScheduledLotteryUseCase = Depends(get_run_scheduled_lottery_use_case),
):
    """
    Sorteo automático del día.

    - `force=1` saltea el gate horario (el filtro deadline == hoy sigue).
    - Re-ejecutar el mismo día no reprocesa actividades ya cerradas.
    """
    set_lottery_trigger("cron")
    try:
        result = use_case.execute(force=force == "1")
    except (AppHTTPException, SpacedError):
        raise
    except Exception as exc:
        logger.exception("sorteo programado falló")
        raise internal_error(LOTTERY_FAILED_MESSAGE) from exc
    return result.to_dict()


@router.post(
    "/admin/volunteer/activities/{activity_id}/publish",
    tags=["lottery"],
)
def publish_activity(
    activity_id: int,
    session: Session = Depends(require_admin_session),
    use_case: PublishActivityUseCase = Depends(get_publish_activity_use_case),
):
    """Publicar y sortear una actividad concreta (sin importar su plazo)."""
    set_lottery_trigger("admin")
    result = use_case.execute(activity_id)
    if result.error is not None:
        _raise_for_lottery_error(result.error)
    logger.info(
        "sorteo manual",
        extra={"activity_id": activity_id, "admin": session.nickname},
    )
    return {"success": True, "detail": result.detail.to_dict()}
