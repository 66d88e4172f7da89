"""
Name: Volunteer Use Case Tests

Responsibilities:
  - Create activity validation and defaults
  - Registration rules (open, deadline, duplicates)
  - Listing, unpublish and yearly stats
  - Published winners (masked), participant list and deletion
"""

from datetime import date, datetime

import pytest

from conftest import kst, make_activity, make_registration
from spaced_api.application.usecases.volunteer import (
    CreateActivityInput,
    CreateActivityUseCase,
    DeleteActivityUseCase,
    ListActivitiesUseCase,
    ListActivityRegistrationsUseCase,
    ListMyRegistrationsUseCase,
    ListWinnersUseCase,
    RegisterForActivityUseCase,
    UnpublishActivityUseCase,
    VolunteerErrorCode,
    VolunteerStatsUseCase,
)
from spaced_api.domain.entities import ActivityStatus, RegistrationStatus

pytestmark = pytest.mark.unit


class TestCreateActivity:
    def test_creates_open_unpublished_activity(self, volunteer_repo, fixed_clock):
        result = CreateActivityUseCase(volunteer_repo, fixed_clock).execute(
            CreateActivityInput(
                title="  해변 정화  ",
                date=date(2026, 4, 5),
                deadline=date(2026, 3, 31),
                max_participants=10,
                location="부산",
            )
        )

        activity = result.activity
        assert result.error is None
        assert activity.id is not None
        assert activity.title == "해변 정화"
        assert activity.status == ActivityStatus.OPEN
        assert activity.is_published is False
        assert activity.created_at == fixed_clock.now()

    def test_deadline_defaults_to_today(self, volunteer_repo, fixed_clock):
        result = CreateActivityUseCase(volunteer_repo, fixed_clock).execute(
            CreateActivityInput(title="t", max_participants=1)
        )

        assert result.activity.deadline == date(2026, 3, 10)

    def test_blank_title(self, volunteer_repo, fixed_clock):
        result = CreateActivityUseCase(volunteer_repo, fixed_clock).execute(
            CreateActivityInput(title="   ")
        )

        assert result.error.code == VolunteerErrorCode.VALIDATION_ERROR
        assert result.error.message == "제목을 입력해주세요."

    def test_negative_capacity(self, volunteer_repo, fixed_clock):
        result = CreateActivityUseCase(volunteer_repo, fixed_clock).execute(
            CreateActivityInput(title="t", max_participants=-1)
        )

        assert result.error.message == "모집 인원은 0 이상이어야 합니다."


class TestRegisterForActivity:
    @pytest.fixture
    def use_case(self, volunteer_repo, fixed_clock):
        return RegisterForActivityUseCase(volunteer_repo, fixed_clock)

    def test_creates_pending_registration(self, use_case, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo)

        result = use_case.execute(activity.id, " E100 ", "alice")

        reg = result.registration
        assert result.error is None
        assert reg.employee_id == "E100"
        assert reg.user_name == "alice"
        assert reg.status == RegistrationStatus.PENDING
        assert reg.created_at == fixed_clock.now()

    def test_oversubscription_is_allowed(self, use_case, volunteer_repo):
        activity = make_activity(volunteer_repo, max_participants=1)
        use_case.execute(activity.id, "E1", "a")

        assert use_case.execute(activity.id, "E2", "b").error is None

    def test_blank_employee_id(self, use_case, volunteer_repo):
        activity = make_activity(volunteer_repo)

        result = use_case.execute(activity.id, "  ", "alice")

        assert result.error.code == VolunteerErrorCode.VALIDATION_ERROR

    def test_unknown_activity(self, use_case):
        assert use_case.execute(99, "E1", "a").error.code == VolunteerErrorCode.NOT_FOUND

    def test_closed_activity(self, use_case, volunteer_repo):
        activity = make_activity(volunteer_repo, status=ActivityStatus.CLOSED)

        result = use_case.execute(activity.id, "E1", "a")

        assert result.error.code == VolunteerErrorCode.CONFLICT
        assert result.error.message == "모집이 마감된 봉사활동입니다."

    def test_deadline_passed(self, use_case, volunteer_repo):
        activity = make_activity(volunteer_repo, deadline=date(2026, 3, 9))

        result = use_case.execute(activity.id, "E1", "a")

        assert result.error.message == "신청 기간이 지난 봉사활동입니다."

    def test_deadline_day_is_still_open(self, use_case, volunteer_repo, fixed_clock):
        fixed_clock.set(datetime(2026, 3, 10, 23, 59))
        activity = make_activity(volunteer_repo, deadline=date(2026, 3, 10))

        assert use_case.execute(activity.id, "E1", "a").error is None

    def test_duplicate_registration(self, use_case, volunteer_repo):
        activity = make_activity(volunteer_repo)
        use_case.execute(activity.id, "E1", "a")

        result = use_case.execute(activity.id, "E1", "a")

        assert result.error.code == VolunteerErrorCode.CONFLICT
        assert result.error.message == "이미 신청한 봉사활동입니다."


class TestListing:
    def test_list_activities_newest_date_first(self, volunteer_repo):
        older = make_activity(volunteer_repo, date=date(2026, 3, 1))
        newer = make_activity(volunteer_repo, date=date(2026, 5, 1))
        undated = make_activity(volunteer_repo, date=None)

        ids = [a.id for a in ListActivitiesUseCase(volunteer_repo).execute().activities]

        assert ids == [newer.id, older.id, undated.id]

    def test_list_activities_by_status(self, volunteer_repo):
        make_activity(volunteer_repo)
        closed = make_activity(volunteer_repo, status=ActivityStatus.CLOSED)

        result = ListActivitiesUseCase(volunteer_repo).execute(ActivityStatus.CLOSED)

        assert [a.id for a in result.activities] == [closed.id]

    def test_my_registrations_newest_first(self, volunteer_repo):
        activity = make_activity(volunteer_repo)
        other = make_activity(volunteer_repo)
        first = make_registration(
            volunteer_repo, activity.id, "E1", kst(2026, 3, 1, 9), user_name="alice"
        )
        second = make_registration(
            volunteer_repo, other.id, "E1", kst(2026, 3, 2, 9), user_name="alice"
        )
        make_registration(volunteer_repo, other.id, "E2", kst(2026, 3, 3, 9), user_name="bob")

        result = ListMyRegistrationsUseCase(volunteer_repo).execute("alice")

        assert [r.id for r in result.registrations] == [second.id, first.id]


class TestUnpublish:
    def test_unpublish_keeps_closed(self, volunteer_repo):
        activity = make_activity(
            volunteer_repo,
            status=ActivityStatus.CLOSED,
            is_published=True,
            published_at=kst(2026, 3, 10, 9),
        )

        result = UnpublishActivityUseCase(volunteer_repo).execute(activity.id)

        assert result.activity.is_published is False
        assert result.activity.published_at is None
        assert result.activity.status == ActivityStatus.CLOSED

    def test_unknown_activity(self, volunteer_repo):
        result = UnpublishActivityUseCase(volunteer_repo).execute(7)

        assert result.error.code == VolunteerErrorCode.NOT_FOUND


class TestStats:
    def test_counts_confirmed_in_year_sorted(self, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo, status=ActivityStatus.CLOSED)
        confirmed = RegistrationStatus.CONFIRMED
        make_registration(volunteer_repo, activity.id, "B", kst(2026, 1, 2, 9), status=confirmed)
        make_registration(volunteer_repo, activity.id, "A", kst(2026, 2, 2, 9), status=confirmed)
        make_registration(volunteer_repo, activity.id, "C", kst(2026, 2, 3, 9), status=confirmed)
        make_registration(volunteer_repo, activity.id, "C", kst(2026, 2, 4, 9), status=confirmed)
        make_registration(volunteer_repo, activity.id, "D", kst(2025, 6, 1, 9), status=confirmed)
        make_registration(
            volunteer_repo,
            activity.id,
            "E",
            kst(2026, 2, 5, 9),
            status=RegistrationStatus.REJECTED,
        )

        result = VolunteerStatsUseCase(volunteer_repo, fixed_clock).execute()

        assert result.year == 2026
        assert [(e.employee_id, e.confirmed) for e in result.entries] == [
            ("C", 2),
            ("A", 1),
            ("B", 1),
        ]

    def test_explicit_year(self, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo, status=ActivityStatus.CLOSED)
        make_registration(
            volunteer_repo,
            activity.id,
            "D",
            kst(2025, 6, 1, 9),
            status=RegistrationStatus.CONFIRMED,
        )

        result = VolunteerStatsUseCase(volunteer_repo, fixed_clock).execute(2025)

        assert [e.employee_id for e in result.entries] == ["D"]

    def test_invalid_year(self, volunteer_repo, fixed_clock):
        result = VolunteerStatsUseCase(volunteer_repo, fixed_clock).execute(1999)

        assert result.error.code == VolunteerErrorCode.VALIDATION_ERROR


class TestWinnersAndParticipants:
    def _draw(self, repo):
        activity = make_activity(
            repo,
            status=ActivityStatus.CLOSED,
            is_published=True,
            published_at=kst(2026, 3, 10, 9),
        )
        for employee_id, name, status in (
            ("E1", "김철수", RegistrationStatus.CONFIRMED),
            ("E2", "이영", RegistrationStatus.CONFIRMED),
            ("E3", "박", RegistrationStatus.CONFIRMED),
            ("E4", "최민호", RegistrationStatus.REJECTED),
        ):
            make_registration(
                repo,
                activity.id,
                employee_id,
                kst(2026, 3, 1, 9),
                user_name=name,
                status=status,
            )
        return activity

    def test_winners_are_confirmed_and_masked(self, volunteer_repo):
        activity = self._draw(volunteer_repo)

        result = ListWinnersUseCase(volunteer_repo).execute(activity.id)

        assert result.error is None
        assert [w.masked_name for w in result.winners] == ["김*수", "이*", "박"]

    def test_unpublished_result_is_not_found(self, volunteer_repo):
        activity = self._draw(volunteer_repo)
        UnpublishActivityUseCase(volunteer_repo).execute(activity.id)

        result = ListWinnersUseCase(volunteer_repo).execute(activity.id)

        assert result.error.code == VolunteerErrorCode.NOT_FOUND
        assert result.winners == []

    def test_participants_include_every_status(self, volunteer_repo):
        activity = self._draw(volunteer_repo)

        result = ListActivityRegistrationsUseCase(volunteer_repo).execute(activity.id)

        assert [r.employee_id for r in result.registrations] == ["E1", "E2", "E3", "E4"]

    def test_participants_of_unknown_activity(self, volunteer_repo):
        result = ListActivityRegistrationsUseCase(volunteer_repo).execute(404)

        assert result.error.code == VolunteerErrorCode.NOT_FOUND


class TestDeleteActivity:
    def test_deletes_activity_and_registrations(self, volunteer_repo):
        activity = make_activity(volunteer_repo)
        make_registration(volunteer_repo, activity.id, "E1", kst(2026, 3, 1, 9))

        result = DeleteActivityUseCase(volunteer_repo).execute(activity.id)

        assert result.error is None
        assert volunteer_repo.get_activity(activity.id) is None
        assert volunteer_repo.list_registrations(activity.id) == []

    def test_unknown_activity(self, volunteer_repo):
        result = DeleteActivityUseCase(volunteer_repo).execute(8)

        assert result.error.code == VolunteerErrorCode.NOT_FOUND
