"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/volunteer.py
============================================================
Class: InMemoryVolunteerRepository

Responsibilities:
  - Almacenar actividades, inscripciones y posts en memoria
    (tests / local dev).
  - Replicar la semántica del repo Postgres, incluido el CAS de cierre
    y la atomicidad de publish_draw_result;
    delete_activity arrastra las inscripciones (ON DELETE CASCADE).
  - Mantener ordering determinístico alineado con Postgres.

Collaborators:
  - domain.entities (VolunteerActivity, VolunteerRegistration, AnnouncementPost)
  - domain.repositories.VolunteerRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Entidades inmutables: las mutaciones reemplazan con dataclasses.replace.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Optional

from ....domain.entities import (
    ActivityStatus,
    AnnouncementPost,
    RegistrationStatus,
    VolunteerActivity,
    VolunteerRegistration,
)
from ....domain.repositories import VolunteerRepository


class InMemoryVolunteerRepository(VolunteerRepository):
    """
    Repositorio in-memory, thread-safe.

    Modelo mental:
    - _activities / _registrations / _posts son las "tablas".
    - Los ids son secuencias crecientes, como bigserial.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._activities: Dict[int, VolunteerActivity] = {}
        self._registrations: Dict[int, VolunteerRegistration] = {}
        self._posts: List[AnnouncementPost] = []
        self._next_activity_id = 1
        self._next_registration_id = 1
        self._next_post_id = 1

    # =========================================================
    # Helpers internos
    # =========================================================
    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _sorted_activities(items: Iterable[VolunteerActivity]) -> List[VolunteerActivity]:
        """R: date DESC NULLS LAST, id DESC."""
        return sorted(
            items,
            key=lambda a: (
                a.date is not None,
                a.date or date.min,
                a.id or 0,
            ),
            reverse=True,
        )

    # =========================================================
    # Actividades
    # =========================================================
    def get_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        with self._lock:
            return self._activities.get(activity_id)

    def list_activities(
        self, status: Optional[ActivityStatus] = None
    ) -> List[VolunteerActivity]:
        with self._lock:
            items = [
                a
                for a in self._activities.values()
                if status is None or a.status == status
            ]
        return self._sorted_activities(items)

    def list_open_activities_due(self, deadline: date) -> List[VolunteerActivity]:
        with self._lock:
            items = [
                a
                for a in self._activities.values()
                if a.status == ActivityStatus.OPEN and a.deadline == deadline
            ]
        return sorted(items, key=lambda a: a.id or 0)

    def create_activity(self, activity: VolunteerActivity) -> VolunteerActivity:
        with self._lock:
            stored = replace(
                activity,
                id=self._next_activity_id,
                created_at=activity.created_at or self._now(),
            )
            self._activities[stored.id] = stored
            self._next_activity_id += 1
            return stored

    def unpublish_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        with self._lock:
            current = self._activities.get(activity_id)
            if current is None:
                return None
            updated = replace(current, is_published=False, published_at=None)
            self._activities[activity_id] = updated
            return updated

    def delete_activity(self, activity_id: int) -> bool:
        with self._lock:
            if self._activities.pop(activity_id, None) is None:
                return False
            self._registrations = {
                rid: r
                for rid, r in self._registrations.items()
                if r.activity_id != activity_id
            }
            return True

    # =========================================================
    # Inscripciones
    # =========================================================
    def list_pending_registrations(
        self, activity_ids: List[int]
    ) -> List[VolunteerRegistration]:
        wanted = set(activity_ids)
        with self._lock:
            items = [
                r
                for r in self._registrations.values()
                if r.activity_id in wanted and r.status == RegistrationStatus.PENDING
            ]
        return sorted(items, key=lambda r: (r.created_at, r.id or 0))

    def count_confirmed_by_employee(
        self,
        employee_ids: Optional[List[str]],
        start: datetime,
        end: datetime,
    ) -> Dict[str, int]:
        wanted = None if employee_ids is None else {e for e in employee_ids if e}
        counts: Dict[str, int] = {}
        with self._lock:
            for r in self._registrations.values():
                if r.status != RegistrationStatus.CONFIRMED or not r.employee_id:
                    continue
                if wanted is not None and r.employee_id not in wanted:
                    continue
                if not (start <= r.created_at < end):
                    continue
                counts[r.employee_id] = counts.get(r.employee_id, 0) + 1
        return counts

    def find_registration(
        self, activity_id: int, employee_id: str
    ) -> Optional[VolunteerRegistration]:
        with self._lock:
            for r in self._registrations.values():
                if r.activity_id == activity_id and r.employee_id == employee_id:
                    return r
        return None

    def create_registration(
        self, registration: VolunteerRegistration
    ) -> VolunteerRegistration:
        with self._lock:
            stored = replace(registration, id=self._next_registration_id)
            self._registrations[stored.id] = stored
            self._next_registration_id += 1
            return stored

    def list_registrations_by_user(self, user_name: str) -> List[VolunteerRegistration]:
        with self._lock:
            items = [r for r in self._registrations.values() if r.user_name == user_name]
        return sorted(items, key=lambda r: (r.created_at, r.id or 0), reverse=True)

    def list_registrations(
        self, activity_id: int, status: Optional[RegistrationStatus] = None
    ) -> List[VolunteerRegistration]:
        with self._lock:
            items = [
                r
                for r in self._registrations.values()
                if r.activity_id == activity_id and (status is None or r.status == status)
            ]
        return sorted(items, key=lambda r: (r.created_at, r.id or 0))

    def get_registration(self, registration_id: int) -> Optional[VolunteerRegistration]:
        with self._lock:
            return self._registrations.get(registration_id)

    # =========================================================
    # Sorteo
    # =========================================================
    def publish_draw_result(
        self,
        activity_id: int,
        winner_ids: List[int],
        loser_ids: List[int],
        published_at: datetime,
        announcement: AnnouncementPost,
    ) -> bool:
        with self._lock:
            current = self._activities.get(activity_id)
            if current is None or current.status != ActivityStatus.OPEN:
                return False

            self._activities[activity_id] = replace(
                current,
                status=ActivityStatus.CLOSED,
                is_published=True,
                published_at=published_at,
            )
            self._set_pending_status(winner_ids, RegistrationStatus.CONFIRMED)
            self._set_pending_status(loser_ids, RegistrationStatus.REJECTED)

            self._posts.append(
                replace(announcement, id=self._next_post_id, created_at=published_at)
            )
            self._next_post_id += 1
            return True

    def _set_pending_status(
        self, registration_ids: Iterable[int], status: RegistrationStatus
    ) -> None:
        for rid in registration_ids:
            reg = self._registrations.get(rid)
            if reg is not None and reg.status == RegistrationStatus.PENDING:
                self._registrations[rid] = replace(reg, status=status)

    @property
    def posts(self) -> List[AnnouncementPost]:
        with self._lock:
            return list(self._posts)

    def ping(self) -> bool:
        return True
