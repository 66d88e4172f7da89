"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios para autenticación (por nickname / por id).
  - Crear usuarios y actualizar password_hash (login con migración / cambio).
  - Ejecutar SQL parametrizado contra la tabla `users` (contrato con migraciones).
  - Mapear filas crudas -> entidad `User`.
  - Exponer fallos consistentes vía `DatabaseError` con logging estructurado.

Collaborators:
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - infrastructure.db.pool.require_pool (pool global)
  - identity.users.User
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio.
  - Retorna None cuando no existe el recurso (no exception por “not found”).
  - SQL parametrizado siempre (nunca interpolar input de usuario).
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....identity.users import User

# R: Lista explícita de columnas para mantener el contrato estable con migraciones.
_USER_COLUMNS = (
    "id, nickname, password_hash, employee_id, gender, profile_icon_url, "
    "is_admin, created_at"
)


def _get_pool(pool: ConnectionPool | None = None) -> ConnectionPool:
    if pool is not None:
        return pool
    from ...db.pool import require_pool

    return require_pool()


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        nickname=row[1],
        password_hash=row[2] or "",
        employee_id=row[3],
        gender=row[4],
        profile_icon_url=row[5],
        is_admin=row[6] is True,
        created_at=row[7],
    )


def _fetchone(
    *,
    query: str,
    params: Iterable[object],
    log_msg: str,
    log_extra: dict[str, object],
    pool: ConnectionPool | None = None,
) -> tuple | None:
    """
    Ejecuta un statement ... fetchone() con manejo consistente de errores.

    - Centraliza logging + raise DatabaseError.
    - El pool se resuelve fuera del try: sin pool es ConfigurationError.
    """
    resolved = _get_pool(pool)
    try:
        with resolved.connection() as conn:
            return conn.execute(query, tuple(params)).fetchone()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


def get_user_by_nickname(
    nickname: str, *, pool: ConnectionPool | None = None
) -> Optional[User]:
    """Lookup exacto (sensible a mayúsculas) para login."""
    row = _fetchone(
        query=f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE nickname = %s
        """,
        params=(nickname,),
        log_msg="PostgresUserRepository: get_user_by_nickname failed",
        log_extra={"nickname": nickname},
        pool=pool,
    )
    return _row_to_user(row) if row else None


def get_user_by_id(
    user_id: UUID, *, pool: ConnectionPool | None = None
) -> Optional[User]:
    row = _fetchone(
        query=f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = %s
        """,
        params=(user_id,),
        log_msg="PostgresUserRepository: get_user_by_id failed",
        log_extra={"user_id": str(user_id)},
        pool=pool,
    )
    return _row_to_user(row) if row else None


def update_password_hash(
    user_id: UUID, password_hash: str, *, pool: ConnectionPool | None = None
) -> bool:
    row = _fetchone(
        query="""
            UPDATE users
            SET password_hash = %s
            WHERE id = %s
            RETURNING id
        """,
        params=(password_hash, user_id),
        log_msg="PostgresUserRepository: update_password_hash failed",
        log_extra={"user_id": str(user_id)},
        pool=pool,
    )
    return row is not None


def create_user(user: User, *, pool: ConnectionPool | None = None) -> User:
    """
    Crea un usuario y devuelve el registro.

    Nota:
    - Si el nickname ya existe, Postgres lanza error por uq_users_nickname.
      Ese error se envuelve en DatabaseError (la capa superior decide).
    """
    user_id = user.id or uuid4()
    row = _fetchone(
        query=f"""
            INSERT INTO users
                (id, nickname, password_hash, employee_id, gender, profile_icon_url, is_admin)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {_USER_COLUMNS}
        """,
        params=(
            user_id,
            user.nickname,
            user.password_hash,
            user.employee_id,
            user.gender,
            user.profile_icon_url,
            user.is_admin,
        ),
        log_msg="PostgresUserRepository: create_user failed",
        log_extra={"user_id": str(user_id), "nickname": user.nickname},
        pool=pool,
    )
    if not row:
        raise DatabaseError(
            "PostgresUserRepository: create_user failed (no row returned)"
        )
    return _row_to_user(row)


class PostgresUserRepository:
    """
    Wrapper OO sobre las funciones del módulo.

    - Inyección: permite pasar un pool custom en tests.
    - Internamente delega a las funciones del módulo para evitar duplicación.
    """

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def get_user_by_nickname(self, nickname: str) -> Optional[User]:
        return get_user_by_nickname(nickname, pool=self._pool)

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return get_user_by_id(user_id, pool=self._pool)

    def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        return update_password_hash(user_id, password_hash, pool=self._pool)

    def create_user(self, user: User) -> User:
        return create_user(user, pool=self._pool)
