"""
Name: PostgresVolunteerRepository Tests

Responsibilities:
  - Row mapping and parametrized SQL (mocked pool)
  - publish_draw_result: close CAS gates every write, single transaction
  - delete_activity: registrations then activity, single transaction
  - Driver failures wrapped in DatabaseError
"""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from spaced_api.crosscutting.exceptions import DatabaseError
from spaced_api.domain.entities import (
    ActivityStatus,
    AnnouncementPost,
    RegistrationStatus,
)
from spaced_api.infrastructure.repositories.postgres.volunteer import (
    PostgresVolunteerRepository,
)

pytestmark = pytest.mark.unit

NOW = datetime(2026, 3, 10, 0, 0, tzinfo=timezone.utc)

ACTIVITY_ROW = (
    1,
    "연탄 나눔",
    None,
    date(2026, 3, 21),
    date(2026, 3, 10),
    3,
    "open",
    False,
    None,
    None,
    NOW,
)
REGISTRATION_ROW = (10, 1, "E1", "alice", NOW, "pending")


def _pool():
    pool = MagicMock()
    conn = pool.connection.return_value.__enter__.return_value
    return pool, conn


def _sql(call) -> str:
    return " ".join(call.args[0].split())


class TestActivities:
    def test_get_activity_maps_row(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = ACTIVITY_ROW

        activity = PostgresVolunteerRepository(pool=pool).get_activity(1)

        assert activity.id == 1
        assert activity.description == ""
        assert activity.location == ""
        assert activity.status == ActivityStatus.OPEN
        assert activity.is_published is False
        assert conn.execute.call_args.args[1] == (1,)

    def test_get_activity_missing(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = None

        assert PostgresVolunteerRepository(pool=pool).get_activity(1) is None

    def test_invalid_status_is_database_error(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = ACTIVITY_ROW[:6] + (
            "archived",
        ) + ACTIVITY_ROW[7:]

        with pytest.raises(DatabaseError, match="Invalid activity status"):
            PostgresVolunteerRepository(pool=pool).get_activity(1)

    def test_list_open_activities_due_filters_by_status_and_deadline(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = [ACTIVITY_ROW]

        result = PostgresVolunteerRepository(pool=pool).list_open_activities_due(
            date(2026, 3, 10)
        )

        assert [a.id for a in result] == [1]
        call = conn.execute.call_args
        assert "WHERE status = %s AND deadline = %s" in _sql(call)
        assert "ORDER BY id ASC" in _sql(call)
        assert call.args[1] == ("open", date(2026, 3, 10))

    def test_list_activities_by_status(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = []

        PostgresVolunteerRepository(pool=pool).list_activities(ActivityStatus.CLOSED)

        call = conn.execute.call_args
        assert "ORDER BY date DESC NULLS LAST, id DESC" in _sql(call)
        assert call.args[1] == ("closed",)


class TestRegistrations:
    def test_pending_registrations_empty_ids_skips_query(self):
        pool, conn = _pool()

        assert PostgresVolunteerRepository(pool=pool).list_pending_registrations([]) == []
        conn.execute.assert_not_called()

    def test_pending_registrations_ordered(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = [REGISTRATION_ROW]

        result = PostgresVolunteerRepository(pool=pool).list_pending_registrations([1, 2])

        assert result[0].status == RegistrationStatus.PENDING
        call = conn.execute.call_args
        assert "ORDER BY created_at ASC, id ASC" in _sql(call)
        assert call.args[1] == ([1, 2], "pending")

    def test_count_confirmed_with_employee_filter(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = [("E1", 2), ("E2", 1)]
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        end = datetime(2027, 1, 1, tzinfo=timezone.utc)

        counts = PostgresVolunteerRepository(pool=pool).count_confirmed_by_employee(
            ["E1", "", "E2"], start, end
        )

        assert counts == {"E1": 2, "E2": 1}
        call = conn.execute.call_args
        assert "employee_id = ANY(%s)" in _sql(call)
        assert call.args[1] == ("confirmed", start, end, ["E1", "E2"])

    def test_count_confirmed_without_ids_skips_query(self):
        pool, conn = _pool()

        counts = PostgresVolunteerRepository(pool=pool).count_confirmed_by_employee(
            ["", ""], NOW, NOW
        )

        assert counts == {}
        conn.execute.assert_not_called()

    def test_count_confirmed_all_employees(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = []

        PostgresVolunteerRepository(pool=pool).count_confirmed_by_employee(None, NOW, NOW)

        call = conn.execute.call_args
        assert "ANY" not in _sql(call)
        assert call.args[1] == ("confirmed", NOW, NOW)

    def test_driver_error_is_wrapped(self):
        pool, conn = _pool()
        conn.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError, match="find_registration failed"):
            PostgresVolunteerRepository(pool=pool).find_registration(1, "E1")


class TestPublishDrawResult:
    ANNOUNCEMENT = AnnouncementPost(content="연탄 나눔 의 추첨이 완료되었습니다.")

    def test_success_runs_cas_updates_and_post_in_transaction(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = (1,)

        ok = PostgresVolunteerRepository(pool=pool).publish_draw_result(
            1, [10, 11], [12], NOW, self.ANNOUNCEMENT
        )

        assert ok is True
        conn.transaction.assert_called_once()
        statements = [_sql(c) for c in conn.execute.call_args_list]
        assert len(statements) == 4
        assert statements[0].startswith("UPDATE volunteer_activities")
        assert "WHERE id = %s AND status = %s" in statements[0]
        assert conn.execute.call_args_list[0].args[1] == ("closed", NOW, 1, "open")
        assert conn.execute.call_args_list[1].args[1] == ("confirmed", [10, 11], "pending")
        assert conn.execute.call_args_list[2].args[1] == ("rejected", [12], "pending")
        assert statements[3].startswith("INSERT INTO posts")
        assert conn.execute.call_args_list[3].args[1] == (
            "admin",
            self.ANNOUNCEMENT.content,
            True,
            "volunteer",
        )

    def test_lost_cas_writes_nothing_else(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = None

        ok = PostgresVolunteerRepository(pool=pool).publish_draw_result(
            1, [10], [11], NOW, self.ANNOUNCEMENT
        )

        assert ok is False
        assert conn.execute.call_count == 1

    def test_no_losers_skips_reject_update(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = (1,)

        PostgresVolunteerRepository(pool=pool).publish_draw_result(
            1, [10], [], NOW, self.ANNOUNCEMENT
        )

        assert conn.execute.call_count == 3

    def test_failure_is_database_error(self):
        pool, conn = _pool()
        conn.execute.side_effect = RuntimeError("deadlock detected")

        with pytest.raises(DatabaseError, match="publish_draw_result failed"):
            PostgresVolunteerRepository(pool=pool).publish_draw_result(
                1, [10], [], NOW, self.ANNOUNCEMENT
            )


class TestActivityRegistrationsAndDelete:
    def test_list_registrations_all_statuses(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = [REGISTRATION_ROW]

        result = PostgresVolunteerRepository(pool=pool).list_registrations(1)

        assert [r.id for r in result] == [10]
        call = conn.execute.call_args
        assert "status" not in _sql(call).split("WHERE")[1]
        assert call.args[1] == (1,)

    def test_list_registrations_by_status(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchall.return_value = []

        PostgresVolunteerRepository(pool=pool).list_registrations(
            1, RegistrationStatus.CONFIRMED
        )

        call = conn.execute.call_args
        assert "WHERE activity_id = %s AND status = %s" in _sql(call)
        assert "ORDER BY created_at ASC, id ASC" in _sql(call)
        assert call.args[1] == (1, "confirmed")

    def test_delete_removes_registrations_first_in_transaction(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = (1,)

        assert PostgresVolunteerRepository(pool=pool).delete_activity(1) is True

        conn.transaction.assert_called_once()
        statements = [_sql(c) for c in conn.execute.call_args_list]
        assert statements == [
            "DELETE FROM volunteer_registrations WHERE activity_id = %s",
            "DELETE FROM volunteer_activities WHERE id = %s RETURNING id",
        ]
        assert all(c.args[1] == (1,) for c in conn.execute.call_args_list)

    def test_delete_unknown_activity(self):
        pool, conn = _pool()
        conn.execute.return_value.fetchone.return_value = None

        assert PostgresVolunteerRepository(pool=pool).delete_activity(1) is False

    def test_delete_failure_is_database_error(self):
        pool, conn = _pool()
        conn.execute.side_effect = RuntimeError("lock timeout")

        with pytest.raises(DatabaseError, match="delete_activity failed"):
            PostgresVolunteerRepository(pool=pool).delete_activity(1)
