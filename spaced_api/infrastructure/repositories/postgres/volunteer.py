"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/volunteer.py
============================================================
Class: PostgresVolunteerRepository

Responsibilities:
  - Implementar el Registration Store sobre `volunteer_activities`,
    `volunteer_registrations` y `posts`.
  - Contar participaciones confirmadas por empleado (puntaje de prioridad).
  - Borrar una actividad junto con sus inscripciones (una transacción).
  - Publicar el resultado de un sorteo en UNA transacción, condicionada a que
    la actividad siga `open` (compare-and-swap sobre status).
  - Exponer fallos consistentes vía `DatabaseError` con logging estructurado.

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.require_pool
  - domain.entities (VolunteerActivity, VolunteerRegistration, AnnouncementPost)
  - domain.repositories.VolunteerRepository (contrato)

Constraints / Notes:
  - SQL parametrizado siempre; listas vía `= ANY(%s)`.
  - El UPDATE condicional toma el lock de fila: una corrida concurrente
    espera y luego no encuentra la actividad abierta (0 filas).
  - Orden estable en listados (date DESC NULLS LAST, id DESC).
============================================================
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import (
    ActivityStatus,
    AnnouncementPost,
    RegistrationStatus,
    VolunteerActivity,
    VolunteerRegistration,
)

_ACTIVITY_COLUMNS = (
    "id, title, description, date, deadline, max_participants, status, "
    "is_published, published_at, location, created_at"
)
_ACTIVITY_ORDER_BY = "date DESC NULLS LAST, id DESC"

_REGISTRATION_COLUMNS = "id, activity_id, employee_id, user_name, created_at, status"


def _get_pool(pool: ConnectionPool | None = None) -> ConnectionPool:
    if pool is not None:
        return pool
    from ...db.pool import require_pool

    return require_pool()


# ============================================================
# Mapping
# ============================================================
def _row_to_activity(row: tuple) -> VolunteerActivity:
    try:
        status = ActivityStatus(row[6])
    except ValueError as exc:
        raise DatabaseError(f"Invalid activity status in database: {row[6]}") from exc

    return VolunteerActivity(
        id=row[0],
        title=row[1] or "",
        description=row[2] or "",
        date=row[3],
        deadline=row[4],
        max_participants=int(row[5] or 0),
        status=status,
        is_published=row[7] is True,
        published_at=row[8],
        location=row[9] or "",
        created_at=row[10],
    )


def _row_to_registration(row: tuple) -> VolunteerRegistration:
    try:
        status = RegistrationStatus(row[5])
    except ValueError as exc:
        raise DatabaseError(
            f"Invalid registration status in database: {row[5]}"
        ) from exc

    return VolunteerRegistration(
        id=row[0],
        activity_id=row[1],
        employee_id=row[2] or "",
        user_name=row[3] or "",
        created_at=row[4],
        status=status,
    )


# ============================================================
# Ejecución
# ============================================================
def _fetchone(
    *,
    query: str,
    params: Iterable[object],
    log_msg: str,
    log_extra: dict[str, object],
    pool: ConnectionPool | None = None,
) -> tuple | None:
    resolved = _get_pool(pool)
    try:
        with resolved.connection() as conn:
            return conn.execute(query, tuple(params)).fetchone()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


def _fetchall(
    *,
    query: str,
    params: Iterable[object] = (),
    log_msg: str,
    log_extra: dict[str, object],
    pool: ConnectionPool | None = None,
) -> list[tuple]:
    resolved = _get_pool(pool)
    try:
        with resolved.connection() as conn:
            return conn.execute(query, tuple(params)).fetchall()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


# ============================================================
# Actividades
# ============================================================
def get_activity(
    activity_id: int, *, pool: ConnectionPool | None = None
) -> Optional[VolunteerActivity]:
    row = _fetchone(
        query=f"""
            SELECT {_ACTIVITY_COLUMNS}
            FROM volunteer_activities
            WHERE id = %s
        """,
        params=(activity_id,),
        log_msg="PostgresVolunteerRepository: get_activity failed",
        log_extra={"activity_id": activity_id},
        pool=pool,
    )
    return _row_to_activity(row) if row else None


def list_activities(
    status: ActivityStatus | None = None, *, pool: ConnectionPool | None = None
) -> List[VolunteerActivity]:
    if status is None:
        query = f"""
            SELECT {_ACTIVITY_COLUMNS}
            FROM volunteer_activities
            ORDER BY {_ACTIVITY_ORDER_BY}
        """
        params: tuple = ()
    else:
        query = f"""
            SELECT {_ACTIVITY_COLUMNS}
            FROM volunteer_activities
            WHERE status = %s
            ORDER BY {_ACTIVITY_ORDER_BY}
        """
        params = (status.value,)

    rows = _fetchall(
        query=query,
        params=params,
        log_msg="PostgresVolunteerRepository: list_activities failed",
        log_extra={"status": status.value if status else None},
        pool=pool,
    )
    return [_row_to_activity(r) for r in rows]


def list_open_activities_due(
    deadline: date, *, pool: ConnectionPool | None = None
) -> List[VolunteerActivity]:
    rows = _fetchall(
        query=f"""
            SELECT {_ACTIVITY_COLUMNS}
            FROM volunteer_activities
            WHERE status = %s AND deadline = %s
            ORDER BY id ASC
        """,
        params=(ActivityStatus.OPEN.value, deadline),
        log_msg="PostgresVolunteerRepository: list_open_activities_due failed",
        log_extra={"deadline": deadline.isoformat()},
        pool=pool,
    )
    return [_row_to_activity(r) for r in rows]


def create_activity(
    activity: VolunteerActivity, *, pool: ConnectionPool | None = None
) -> VolunteerActivity:
    row = _fetchone(
        query=f"""
            INSERT INTO volunteer_activities
                (title, description, date, deadline, max_participants, status,
                 is_published, published_at, location)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_ACTIVITY_COLUMNS}
        """,
        params=(
            activity.title,
            activity.description,
            activity.date,
            activity.deadline,
            activity.max_participants,
            activity.status.value,
            activity.is_published,
            activity.published_at,
            activity.location,
        ),
        log_msg="PostgresVolunteerRepository: create_activity failed",
        log_extra={"title": activity.title},
        pool=pool,
    )
    if not row:
        raise DatabaseError(
            "PostgresVolunteerRepository: create_activity failed (no row returned)"
        )
    return _row_to_activity(row)


def unpublish_activity(
    activity_id: int, *, pool: ConnectionPool | None = None
) -> Optional[VolunteerActivity]:
    row = _fetchone(
        query=f"""
            UPDATE volunteer_activities
            SET is_published = false, published_at = NULL
            WHERE id = %s
            RETURNING {_ACTIVITY_COLUMNS}
        """,
        params=(activity_id,),
        log_msg="PostgresVolunteerRepository: unpublish_activity failed",
        log_extra={"activity_id": activity_id},
        pool=pool,
    )
    return _row_to_activity(row) if row else None


def delete_activity(activity_id: int, *, pool: ConnectionPool | None = None) -> bool:
    """
    Borra la actividad y sus inscripciones en una transacción.

    Orden: inscripciones primero, luego la actividad (False si no existía).
    """
    resolved = _get_pool(pool)
    try:
        with resolved.connection() as conn:
            with conn.transaction():
                conn.execute(
                    "DELETE FROM volunteer_registrations WHERE activity_id = %s",
                    (activity_id,),
                )
                deleted = conn.execute(
                    "DELETE FROM volunteer_activities WHERE id = %s RETURNING id",
                    (activity_id,),
                ).fetchone()
                return deleted is not None
    except Exception as exc:
        log_msg = "PostgresVolunteerRepository: delete_activity failed"
        logger.exception(log_msg, extra={"activity_id": activity_id, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


# ============================================================
# Inscripciones
# ============================================================
def list_pending_registrations(
    activity_ids: List[int], *, pool: ConnectionPool | None = None
) -> List[VolunteerRegistration]:
    if not activity_ids:
        return []

    rows = _fetchall(
        query=f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM volunteer_registrations
            WHERE activity_id = ANY(%s) AND status = %s
            ORDER BY created_at ASC, id ASC
        """,
        params=(list(activity_ids), RegistrationStatus.PENDING.value),
        log_msg="PostgresVolunteerRepository: list_pending_registrations failed",
        log_extra={"activity_count": len(activity_ids)},
        pool=pool,
    )
    return [_row_to_registration(r) for r in rows]


def count_confirmed_by_employee(
    employee_ids: Optional[List[str]],
    start: datetime,
    end: datetime,
    *,
    pool: ConnectionPool | None = None,
) -> Dict[str, int]:
    if employee_ids is not None:
        ids = [e for e in employee_ids if e]
        if not ids:
            return {}
        employee_filter = "AND employee_id = ANY(%s)"
        params: tuple = (RegistrationStatus.CONFIRMED.value, start, end, ids)
    else:
        employee_filter = ""
        params = (RegistrationStatus.CONFIRMED.value, start, end)

    rows = _fetchall(
        query=f"""
            SELECT employee_id, COUNT(*)
            FROM volunteer_registrations
            WHERE status = %s
              AND created_at >= %s
              AND created_at < %s
              AND employee_id IS NOT NULL
              AND employee_id <> ''
              {employee_filter}
            GROUP BY employee_id
        """,
        params=params,
        log_msg="PostgresVolunteerRepository: count_confirmed_by_employee failed",
        log_extra={"start": start.isoformat(), "end": end.isoformat()},
        pool=pool,
    )
    return {str(r[0]): int(r[1]) for r in rows}


def find_registration(
    activity_id: int, employee_id: str, *, pool: ConnectionPool | None = None
) -> Optional[VolunteerRegistration]:
    row = _fetchone(
        query=f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM volunteer_registrations
            WHERE activity_id = %s AND employee_id = %s
            LIMIT 1
        """,
        params=(activity_id, employee_id),
        log_msg="PostgresVolunteerRepository: find_registration failed",
        log_extra={"activity_id": activity_id},
        pool=pool,
    )
    return _row_to_registration(row) if row else None


def create_registration(
    registration: VolunteerRegistration, *, pool: ConnectionPool | None = None
) -> VolunteerRegistration:
    """
    Inserta la postulación.

    Nota:
    - Un duplicado concurrente choca con uq_volunteer_registrations_activity_employee
      y se envuelve en DatabaseError.
    """
    row = _fetchone(
        query=f"""
            INSERT INTO volunteer_registrations
                (activity_id, employee_id, user_name, created_at, status)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_REGISTRATION_COLUMNS}
        """,
        params=(
            registration.activity_id,
            registration.employee_id,
            registration.user_name,
            registration.created_at,
            registration.status.value,
        ),
        log_msg="PostgresVolunteerRepository: create_registration failed",
        log_extra={"activity_id": registration.activity_id},
        pool=pool,
    )
    if not row:
        raise DatabaseError(
            "PostgresVolunteerRepository: create_registration failed (no row returned)"
        )
    return _row_to_registration(row)


def list_registrations_by_user(
    user_name: str, *, pool: ConnectionPool | None = None
) -> List[VolunteerRegistration]:
    rows = _fetchall(
        query=f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM volunteer_registrations
            WHERE user_name = %s
            ORDER BY created_at DESC, id DESC
        """,
        params=(user_name,),
        log_msg="PostgresVolunteerRepository: list_registrations_by_user failed",
        log_extra={},
        pool=pool,
    )
    return [_row_to_registration(r) for r in rows]


def list_registrations(
    activity_id: int,
    status: RegistrationStatus | None = None,
    *,
    pool: ConnectionPool | None = None,
) -> List[VolunteerRegistration]:
    status_filter = "AND status = %s" if status is not None else ""
    params: tuple = (activity_id, status.value) if status is not None else (activity_id,)

    rows = _fetchall(
        query=f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM volunteer_registrations
            WHERE activity_id = %s {status_filter}
            ORDER BY created_at ASC, id ASC
        """,
        params=params,
        log_msg="PostgresVolunteerRepository: list_registrations failed",
        log_extra={"activity_id": activity_id},
        pool=pool,
    )
    return [_row_to_registration(r) for r in rows]


# ============================================================
# Sorteo
# ============================================================
def publish_draw_result(
    activity_id: int,
    winner_ids: List[int],
    loser_ids: List[int],
    published_at: datetime,
    announcement: AnnouncementPost,
    *,
    pool: ConnectionPool | None = None,
) -> bool:
    """
    Publica el resultado de un sorteo (todo o nada).

    1) Cierra la actividad solo si sigue open (CAS).
    2) Confirma ganadores y rechaza perdedores (solo filas pending).
    3) Inserta el anuncio en posts.
    """
    resolved = _get_pool(pool)
    try:
        with resolved.connection() as conn:
            with conn.transaction():
                closed = conn.execute(
                    """
                    UPDATE volunteer_activities
                    SET status = %s, is_published = true, published_at = %s
                    WHERE id = %s AND status = %s
                    RETURNING id
                    """,
                    (
                        ActivityStatus.CLOSED.value,
                        published_at,
                        activity_id,
                        ActivityStatus.OPEN.value,
                    ),
                ).fetchone()
                if closed is None:
                    return False

                if winner_ids:
                    conn.execute(
                        """
                        UPDATE volunteer_registrations
                        SET status = %s
                        WHERE id = ANY(%s) AND status = %s
                        """,
                        (
                            RegistrationStatus.CONFIRMED.value,
                            list(winner_ids),
                            RegistrationStatus.PENDING.value,
                        ),
                    )

                if loser_ids:
                    conn.execute(
                        """
                        UPDATE volunteer_registrations
                        SET status = %s
                        WHERE id = ANY(%s) AND status = %s
                        """,
                        (
                            RegistrationStatus.REJECTED.value,
                            list(loser_ids),
                            RegistrationStatus.PENDING.value,
                        ),
                    )

                conn.execute(
                    """
                    INSERT INTO posts (author_nickname, content, is_admin, post_type)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (
                        announcement.author_nickname,
                        announcement.content,
                        announcement.is_admin,
                        announcement.post_type,
                    ),
                )
                return True
    except Exception as exc:
        log_msg = "PostgresVolunteerRepository: publish_draw_result failed"
        logger.exception(
            log_msg,
            extra={
                "activity_id": activity_id,
                "winners": len(winner_ids),
                "losers": len(loser_ids),
                "error": str(exc),
            },
        )
        raise DatabaseError(f"{log_msg}: {exc}") from exc


def ping(*, pool: ConnectionPool | None = None) -> bool:
    row = _fetchone(
        query="SELECT 1",
        params=(),
        log_msg="PostgresVolunteerRepository: ping failed",
        log_extra={},
        pool=pool,
    )
    return bool(row)


# ============================================================
# Clase wrapper
# ============================================================
class PostgresVolunteerRepository:
    """Wrapper OO sobre las funciones del módulo (pool inyectable en tests)."""

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    # --- actividades ---
    def get_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        return get_activity(activity_id, pool=self._pool)

    def list_activities(
        self, status: Optional[ActivityStatus] = None
    ) -> List[VolunteerActivity]:
        return list_activities(status, pool=self._pool)

    def list_open_activities_due(self, deadline: date) -> List[VolunteerActivity]:
        return list_open_activities_due(deadline, pool=self._pool)

    def create_activity(self, activity: VolunteerActivity) -> VolunteerActivity:
        return create_activity(activity, pool=self._pool)

    def unpublish_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        return unpublish_activity(activity_id, pool=self._pool)

    def delete_activity(self, activity_id: int) -> bool:
        return delete_activity(activity_id, pool=self._pool)

    # --- inscripciones ---
    def list_pending_registrations(
        self, activity_ids: List[int]
    ) -> List[VolunteerRegistration]:
        return list_pending_registrations(activity_ids, pool=self._pool)

    def count_confirmed_by_employee(
        self,
        employee_ids: Optional[List[str]],
        start: datetime,
        end: datetime,
    ) -> Dict[str, int]:
        return count_confirmed_by_employee(employee_ids, start, end, pool=self._pool)

    def find_registration(
        self, activity_id: int, employee_id: str
    ) -> Optional[VolunteerRegistration]:
        return find_registration(activity_id, employee_id, pool=self._pool)

    def create_registration(
        self, registration: VolunteerRegistration
    ) -> VolunteerRegistration:
        return create_registration(registration, pool=self._pool)

    def list_registrations_by_user(self, user_name: str) -> List[VolunteerRegistration]:
        return list_registrations_by_user(user_name, pool=self._pool)

    def list_registrations(
        self, activity_id: int, status: Optional[RegistrationStatus] = None
    ) -> List[VolunteerRegistration]:
        return list_registrations(activity_id, status, pool=self._pool)

    # --- sorteo ---
    def publish_draw_result(
        self,
        activity_id: int,
        winner_ids: List[int],
        loser_ids: List[int],
        published_at: datetime,
        announcement: AnnouncementPost,
    ) -> bool:
        return publish_draw_result(
            activity_id,
            winner_ids,
            loser_ids,
            published_at,
            announcement,
            pool=self._pool,
        )

    def ping(self) -> bool:
        return ping(pool=self._pool)
