"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de Usuarios (nickname + password)

Responsabilidades:
    - Validar credenciales contra el hash almacenado (versionado o legacy).
    - Migrar de forma transparente hashes legacy / con pocas iteraciones.
    - Cambiar password verificando el actual.
    - Igualar el costo de verificación cuando el usuario no existe.

Colaboradores:
    - identity.passwords: hash_password / verify_password.
    - domain.repositories.UserRepository: lookup y update del hash.
    - crosscutting.error_responses: errores HTTP estándar.
    - crosscutting.metrics: intentos de login por resultado.

Decisiones de diseño:
    - No diferenciamos “usuario no existe” vs “password incorrecto” (None).
    - Si falla persistir el hash migrado, se loguea y el login sigue.
    - No loguear passwords ni hashes; solo info mínima y segura.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ..crosscutting.error_responses import bad_request, not_found, unauthorized
from ..crosscutting.exceptions import DatabaseError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_login_attempt
from ..domain.repositories import UserRepository
from .passwords import dummy_password_hash, hash_password, verify_password
from .users import User

NEW_PASSWORD_MIN_LENGTH: int = 4
NEW_PASSWORD_MAX_LENGTH: int = 128


def authenticate_user(
    nickname: str, password: str, users: UserRepository
) -> User | None:
    """Valida credenciales y retorna el usuario o None.

    Seguridad:
        - El nickname se recorta en el borde (sensible a mayúsculas).
        - Un usuario inexistente igual paga una verificación PBKDF2.
    """
    normalized = (nickname or "").strip()
    if not normalized or not password:
        return None

    user = users.get_user_by_nickname(normalized)
    if user is None:
        verify_password(password, dummy_password_hash())
        logger.info("login rechazado", extra={"reason": "unknown_user"})
        record_login_attempt("unknown_user")
        return None

    check = verify_password(password, user.password_hash)
    if not check.valid:
        logger.info(
            "login rechazado",
            extra={"reason": "password_mismatch", "user_id": str(user.id)},
        )
        record_login_attempt("password_mismatch")
        return None

    if check.needs_rehash:
        _upgrade_password_hash(user, password, users)

    record_login_attempt("success")
    return user


def _upgrade_password_hash(user: User, password: str, users: UserRepository) -> None:
    try:
        updated = users.update_password_hash(user.id, hash_password(password))
    except DatabaseError as exc:
        logger.warning(
            "migración de hash omitida",
            extra={"user_id": str(user.id), "error": exc.message},
        )
        return

    if updated:
        logger.info("hash de password migrado", extra={"user_id": str(user.id)})
    else:
        logger.warning(
            "migración de hash omitida", extra={"user_id": str(user.id), "error": "no rows"}
        )


def change_password(
    user_id: str,
    current_password: str,
    new_password: str,
    users: UserRepository,
) -> None:
    """Cambia el password del usuario de la sesión (siempre al formato actual)."""
    if not current_password:
        raise bad_request("현재 비밀번호를 입력해주세요.")
    if not new_password:
        raise bad_request("새 비밀번호를 입력해주세요.")
    if len(new_password) < NEW_PASSWORD_MIN_LENGTH:
        raise bad_request("새 비밀번호는 4자 이상이어야 합니다.")
    if len(new_password) > NEW_PASSWORD_MAX_LENGTH:
        raise bad_request("새 비밀번호는 128자 이하여야 합니다.")
    if new_password == current_password:
        raise bad_request("새 비밀번호는 현재 비밀번호와 달라야 합니다.")

    try:
        uid = UUID(user_id)
    except ValueError as exc:
        raise unauthorized() from exc

    user = users.get_user_by_id(uid)
    if user is None:
        raise not_found("사용자를 찾을 수 없습니다.")

    if not verify_password(current_password, user.password_hash).valid:
        raise bad_request("현재 비밀번호가 일치하지 않습니다.")

    if not users.update_password_hash(user.id, hash_password(new_password)):
        raise not_found("사용자를 찾을 수 없습니다.")

    logger.info("password actualizado", extra={"user_id": str(user.id)})
