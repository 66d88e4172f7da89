"""
===============================================================================
TARJETA CRC — identity/sessions.py
===============================================================================

Módulo:
    Sesiones firmadas sin estado (HMAC-SHA256) + transporte en cookie

Responsabilidades:
    - Emitir tokens `<payload b64url>.<firma b64url>` con `exp` absoluto.
    - Verificar firma (tiempo constante), estructura y expiración.
    - Setear/limpiar la cookie de sesión (Secure solo sobre https).
    - Exponer la dependencia FastAPI require_session(admin_only=...).

Colaboradores:
    - crosscutting.config.get_settings: secreto, TTL y nombre de cookie.
    - crosscutting.cors.request_protocol: protocolo efectivo del request.
    - crosscutting.error_responses: unauthorized/forbidden estándar.
    - identity.passwords.constant_time_equals

Decisiones de diseño:
    - No hay store de sesiones: el token es autocontenido.
    - Sin secreto configurado, el guard falla cerrado con 500 (error de operador).
    - No loguear tokens; solo info mínima y segura.
===============================================================================
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from fastapi import Request, Response

from ..crosscutting.config import get_settings
from ..crosscutting.cors import request_protocol
from ..crosscutting.error_responses import forbidden, unauthorized
from ..crosscutting.exceptions import ConfigurationError
from .passwords import constant_time_equals

SESSION_TTL_SECONDS: int = 10 * 60 * 60
MISSING_SECRET_MESSAGE = "API_SESSION_SECRET 환경변수가 설정되지 않았습니다."

# R: claims del payload (compatibles con el cliente existente)
CLAIM_UID: str = "uid"
CLAIM_NICKNAME: str = "nickname"
CLAIM_IS_ADMIN: str = "isAdmin"
CLAIM_EXP: str = "exp"


@dataclass(frozen=True, slots=True)
class Session:
    """Sesión decodificada y validada."""

    uid: str
    nickname: str
    is_admin: bool
    exp: int

    @property
    def expires_at(self) -> str:
        return format_expires_at(self.exp)


# ---------------------------------------------------------------------------
# Codificación
# ---------------------------------------------------------------------------


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _sign(encoded_payload: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), encoded_payload.encode("ascii"), hashlib.sha256
    ).digest()
    return _b64url_encode(digest)


def format_expires_at(exp: int | float) -> str:
    """ISO-8601 UTC con milisegundos y sufijo Z."""
    moment = datetime.fromtimestamp(exp, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def create_session_token(
    payload: Mapping[str, Any],
    secret: str,
    ttl_seconds: int = SESSION_TTL_SECONDS,
    *,
    now: int | None = None,
) -> str:
    """Firma `{...payload, exp}`; exp = now + ttl (segundos epoch)."""
    if not secret:
        raise ConfigurationError(MISSING_SECRET_MESSAGE)

    issued = int(now if now is not None else time.time())
    body = {**payload, CLAIM_EXP: issued + int(ttl_seconds)}
    encoded = _b64url_encode(
        json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    )
    return f"{encoded}.{_sign(encoded, secret)}"


def verify_session_token(
    token: Any, secret: str, *, now: int | None = None
) -> dict[str, Any] | None:
    """Devuelve el payload decodificado o None (nunca lanza)."""
    if not token or not isinstance(token, str) or not secret:
        return None

    parts = token.split(".")
    if len(parts) != 2:
        return None

    encoded, signature = parts
    try:
        expected = _sign(encoded, secret)
    except UnicodeEncodeError:
        return None
    if not constant_time_equals(
        signature.encode("utf-8"), expected.encode("ascii")
    ):
        return None

    try:
        payload = json.loads(_b64url_decode(encoded).decode("utf-8"))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(payload, dict):
        return None

    exp = payload.get(CLAIM_EXP)
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not exp:
        return None
    current = int(now if now is not None else time.time())
    if exp < current:
        return None
    return payload


def session_from_payload(payload: Mapping[str, Any] | None) -> Session | None:
    if not payload:
        return None
    uid = payload.get(CLAIM_UID)
    nickname = payload.get(CLAIM_NICKNAME)
    if not uid or not nickname:
        return None
    return Session(
        uid=str(uid),
        nickname=str(nickname),
        is_admin=payload.get(CLAIM_IS_ADMIN) is True,
        exp=int(payload[CLAIM_EXP]),
    )


def issue_session(
    *, uid: str, nickname: str, is_admin: bool, now: int | None = None
) -> tuple[str, Session]:
    """Emite token + Session con el secreto y TTL de Settings."""
    s = get_settings()
    issued = int(now if now is not None else time.time())
    token = create_session_token(
        {CLAIM_UID: uid, CLAIM_NICKNAME: nickname, CLAIM_IS_ADMIN: is_admin is True},
        s.api_session_secret,
        s.session_ttl_seconds,
        now=issued,
    )
    session = Session(
        uid=uid,
        nickname=nickname,
        is_admin=is_admin is True,
        exp=issued + s.session_ttl_seconds,
    )
    return token, session


# ---------------------------------------------------------------------------
# Cookie
# ---------------------------------------------------------------------------


def _use_secure_cookie(request: Request) -> bool:
    return request_protocol(request.headers) == "https"


def set_session_cookie(
    request: Request, response: Response, token: str, ttl_seconds: int | None = None
) -> None:
    s = get_settings()
    response.set_cookie(
        key=s.session_cookie_name,
        value=token,
        max_age=ttl_seconds if ttl_seconds is not None else s.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="strict",
        secure=_use_secure_cookie(request),
    )


def clear_session_cookie(request: Request, response: Response) -> None:
    s = get_settings()
    response.set_cookie(
        key=s.session_cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="strict",
        secure=_use_secure_cookie(request),
    )


def get_session_from_request(request: Request) -> Session | None:
    s = get_settings()
    if not s.api_session_secret:
        return None
    token = request.cookies.get(s.session_cookie_name)
    return session_from_payload(verify_session_token(token, s.api_session_secret))


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def require_session(*, admin_only: bool = False) -> Callable:
    """Dependency FastAPI: 500 sin secreto, 401 sin sesión, 403 si no es admin."""

    def dependency(request: Request) -> Session:
        if not get_settings().api_session_secret:
            raise ConfigurationError(MISSING_SECRET_MESSAGE)

        session = get_session_from_request(request)
        if session is None:
            raise unauthorized()

        if admin_only and not session.is_admin:
            raise forbidden()

        request.state.session = session
        return session

    return dependency


require_user_session = require_session()
require_admin_session = require_session(admin_only=True)
