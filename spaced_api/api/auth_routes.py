"""
===============================================================================
TARJETA CRC — spaced_api/api/auth_routes.py (Login / Sesión / Password)
===============================================================================

Responsabilidades:
  - Exponer login/logout/me y cambio de password.
  - Emitir y limpiar la cookie de sesión firmada (HMAC).
  - Aplicar rate limit por IP a los endpoints que verifican passwords.

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP ↔ identity.
  - Fail-safe security: si la autenticación falla, se deniega por defecto.

Colaboradores:
  - identity.auth_users: authenticate_user, change_password
  - identity.sessions: issue_session, set/clear cookie, require_user_session
  - crosscutting.rate_limit: enforce_rate_limit
  - container.get_user_repository
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from ..container import get_user_repository
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    AppHTTPException,
    bad_request,
    internal_error,
    unauthorized,
)
from ..crosscutting.exceptions import ConfigurationError, UpstreamError
from ..crosscutting.logger import logger
from ..crosscutting.rate_limit import enforce_rate_limit
from ..domain.repositories import UserRepository
from ..identity.auth_users import authenticate_user, change_password
from ..identity.sessions import (
    MISSING_SECRET_MESSAGE,
    Session,
    clear_session_cookie,
    issue_session,
    require_user_session,
    set_session_cookie,
)
from ..identity.users import User

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

MISSING_CREDENTIALS_MESSAGE = "닉네임과 비밀번호를 입력해주세요."
INVALID_CREDENTIALS_MESSAGE = "닉네임 또는 비밀번호가 올바르지 않습니다."
LOGIN_FAILED_MESSAGE = "로그인 처리 중 오류가 발생했습니다."
CHANGE_PASSWORD_FAILED_MESSAGE = "비밀번호 변경 중 오류가 발생했습니다."

CHANGE_PASSWORD_RATE_LIMIT_MAX = 10
CHANGE_PASSWORD_RATE_LIMIT_WINDOW_SECONDS = 15 * 60


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    # R: campos opcionales; el "faltan datos" se responde con el mensaje propio.
    nickname: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, max_length=512)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str | None = Field(
        default=None, alias="currentPassword", max_length=512
    )
    new_password: str | None = Field(default=None, alias="newPassword", max_length=512)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _to_login_user(user: User, session: Session) -> dict:
    return {
        "id": str(user.id),
        "nickname": user.nickname,
        "employeeId": user.employee_id,
        "gender": user.gender,
        "profileIconUrl": user.profile_icon_url,
        "isAdmin": user.is_admin is True,
        "isRegistered": True,
        "expiresAt": session.expires_at,
    }


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post(
    "/auth/login",
    tags=["auth"],
    dependencies=[Depends(enforce_rate_limit("login"))],
)
def login(
    req: LoginRequest,
    request: Request,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
):
    """
    Inicia sesión con nickname + password.

    - Usuario inexistente y password incorrecto responden igual (401).
    - Hashes legacy se migran de forma transparente al formato actual.
    """
    nickname = (req.nickname or "").strip()
    if not nickname or not req.password:
        raise bad_request(MISSING_CREDENTIALS_MESSAGE)

    if not get_settings().api_session_secret:
        raise ConfigurationError(MISSING_SECRET_MESSAGE)

    try:
        user = authenticate_user(nickname, req.password, users)
        if user is None:
            raise unauthorized(INVALID_CREDENTIALS_MESSAGE)

        token, session = issue_session(
            uid=str(user.id), nickname=user.nickname, is_admin=user.is_admin
        )
    except (AppHTTPException, ConfigurationError):
        raise
    except UpstreamError as exc:
        # R: el texto del driver (host, SQL) queda en el log, nunca en la respuesta.
        logger.error("login falló: base de datos", extra={"error": exc.message})
        raise internal_error(LOGIN_FAILED_MESSAGE) from exc
    except Exception as exc:
        logger.exception("login falló")
        raise internal_error(LOGIN_FAILED_MESSAGE) from exc

    set_session_cookie(request, response, token)
    logger.info("login exitoso", extra={"user_id": str(user.id)})
    return {"success": True, "user": _to_login_user(user, session)}


@router.post("/auth/logout", tags=["auth"])
def logout(request: Request, response: Response):
    """
    Cierra sesión.

    - Siempre limpia la cookie.
    - No requiere autenticación: es idempotente.
    """
    clear_session_cookie(request, response)
    return {"success": True}


@router.get("/auth/me", tags=["auth"])
def me(session: Session = Depends(require_user_session)):
    return {
        "success": True,
        "user": {
            "id": session.uid,
            "nickname": session.nickname,
            "isAdmin": session.is_admin,
            "expiresAt": session.expires_at,
        },
    }


@router.post(
    "/auth/change-password",
    tags=["auth"],
    dependencies=[
        Depends(
            enforce_rate_limit(
                "change-password",
                CHANGE_PASSWORD_RATE_LIMIT_MAX,
                CHANGE_PASSWORD_RATE_LIMIT_WINDOW_SECONDS,
            )
        )
    ],
)
def change_password_endpoint(
    req: ChangePasswordRequest,
    session: Session = Depends(require_user_session),
    users: UserRepository = Depends(get_user_repository),
):
    try:
        change_password(
            session.uid,
            req.current_password or "",
            req.new_password or "",
            users,
        )
    except UpstreamError as exc:
        logger.error("cambio de password falló: base de datos", extra={"error": exc.message})
        raise internal_error(CHANGE_PASSWORD_FAILED_MESSAGE) from exc
    return {"success": True}
