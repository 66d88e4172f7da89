"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the domain layer (ports).
- Keep the application/domain independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing (fake repositories).

Collaborators
- domain.entities: VolunteerActivity, VolunteerRegistration, AnnouncementPost
- identity.users: User
- infrastructure.repositories: postgres and in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.

Notes
- publish_draw_result is the only multi-row write; it must be atomic and
  conditional on the activity still being open.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Protocol
from uuid import UUID

from ..identity.users import User
from .entities import (
    ActivityStatus,
    AnnouncementPost,
    RegistrationStatus,
    VolunteerActivity,
    VolunteerRegistration,
)


class UserRepository(Protocol):
    """R: Interface for user lookup and password-hash maintenance."""

    def get_user_by_nickname(self, nickname: str) -> Optional[User]:
        """R: Exact (case-sensitive) nickname match."""
        ...

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        ...

    def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        """R: Replace the stored hash. Returns False when the user is gone."""
        ...

    def create_user(self, user: User) -> User:
        ...


class VolunteerRepository(Protocol):
    """
    R: Interface for the Registration Store.

    Implementations must provide:
      - Activity reads/creation, unpublish and deletion
      - Registration reads/creation
      - Confirmed-participation counting for priority scores
      - Atomic, compare-and-swap draw publication
    """

    # ---- activities ----

    def get_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        ...

    def list_activities(
        self, status: Optional[ActivityStatus] = None
    ) -> List[VolunteerActivity]:
        """R: Newest activity date first."""
        ...

    def list_open_activities_due(self, deadline: date) -> List[VolunteerActivity]:
        """R: status = open AND deadline = <deadline>."""
        ...

    def create_activity(self, activity: VolunteerActivity) -> VolunteerActivity:
        ...

    def unpublish_activity(self, activity_id: int) -> Optional[VolunteerActivity]:
        """R: is_published = false, published_at = null; status untouched."""
        ...

    def delete_activity(self, activity_id: int) -> bool:
        """R: Remove the activity and its registrations together. False if unknown."""
        ...

    # ---- registrations ----

    def list_pending_registrations(
        self, activity_ids: List[int]
    ) -> List[VolunteerRegistration]:
        ...

    def count_confirmed_by_employee(
        self,
        employee_ids: Optional[List[str]],
        start: datetime,
        end: datetime,
    ) -> Dict[str, int]:
        """
        R: Confirmed registrations created in [start, end), grouped by employee id.

        employee_ids=None counts every employee; empty ids are never counted.
        """
        ...

    def find_registration(
        self, activity_id: int, employee_id: str
    ) -> Optional[VolunteerRegistration]:
        ...

    def create_registration(
        self, registration: VolunteerRegistration
    ) -> VolunteerRegistration:
        ...

    def list_registrations_by_user(self, user_name: str) -> List[VolunteerRegistration]:
        ...

    def list_registrations(
        self, activity_id: int, status: Optional[RegistrationStatus] = None
    ) -> List[VolunteerRegistration]:
        """R: Registrations of one activity, oldest first."""
        ...

    # ---- draw ----

    def publish_draw_result(
        self,
        activity_id: int,
        winner_ids: List[int],
        loser_ids: List[int],
        published_at: datetime,
        announcement: AnnouncementPost,
    ) -> bool:
        """
        R: Close the activity (only if still open), then confirm winners, reject
        losers and insert the announcement, all-or-nothing.

        Returns False with no writes when the activity is no longer open.
        """
        ...

    def ping(self) -> bool:
        ...
