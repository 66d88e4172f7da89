"""
Name: Lottery Endpoint Tests

Responsibilities:
  - Bearer CRON_SECRET gate (401 / 500 without secret)
  - Hour gate, force=1 and response shapes over GET and POST
  - Admin manual publish mapping (200 / 403 / 404 / 409)
"""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from conftest import TEST_CRON_SECRET, kst, make_activity, make_registration
from spaced_api.application.usecases.lottery import RunScheduledLotteryUseCase
from spaced_api.crosscutting.exceptions import DatabaseError
from spaced_api.domain.entities import ActivityStatus, RegistrationStatus

pytestmark = pytest.mark.unit

LOTTERY_URL = "/api/volunteer-auto-lottery"
AUTH = {"Authorization": f"Bearer {TEST_CRON_SECRET}"}


class TestCronAuth:
    def test_wrong_bearer_is_401_and_touches_nothing(
        self, client, volunteer_repo, fixed_clock
    ):
        activity = make_activity(volunteer_repo)
        make_registration(volunteer_repo, activity.id, "E1", kst(2026, 3, 5, 9))

        response = client.get(LOTTERY_URL, headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        assert volunteer_repo.get_activity(activity.id).status == ActivityStatus.OPEN

    def test_missing_header_is_401(self, client, fixed_clock):
        assert client.post(LOTTERY_URL).status_code == 401

    def test_secret_without_bearer_prefix_is_401(self, client, fixed_clock):
        response = client.get(LOTTERY_URL, headers={"Authorization": TEST_CRON_SECRET})

        assert response.status_code == 401

    def test_padded_bearer_token_is_accepted(self, client, fixed_clock):
        response = client.get(
            LOTTERY_URL, headers={"Authorization": f"Bearer   {TEST_CRON_SECRET}"}
        )

        assert response.status_code == 200

    @pytest.mark.parametrize(
        "header",
        [f"Bearer {TEST_CRON_SECRET} ", f"Bearer {TEST_CRON_SECRET}\t"],
    )
    def test_trailing_whitespace_is_trimmed(self, header):
        from starlette.requests import Request

        from spaced_api.api.lottery_routes import require_cron_secret

        request = Request(
            {
                "type": "http",
                "method": "GET",
                "path": LOTTERY_URL,
                "headers": [(b"authorization", header.encode())],
            }
        )

        assert require_cron_secret(request) is None

    def test_bare_bearer_prefix_is_401(self, client, fixed_clock):
        response = client.get(LOTTERY_URL, headers={"Authorization": "Bearer    "})

        assert response.status_code == 401

    def test_missing_secret_is_500(self, client, monkeypatch, fixed_clock):
        from spaced_api.crosscutting.config import get_settings

        monkeypatch.delenv("CRON_SECRET")
        get_settings.cache_clear()

        response = client.get(LOTTERY_URL, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "CRON_SECRET 환경변수가 없습니다.",
        }


class TestCronRun:
    def test_outside_hour_is_skipped(self, client, volunteer_repo, fixed_clock):
        fixed_clock.set(datetime(2026, 3, 10, 15, 0))
        activity = make_activity(volunteer_repo)
        make_registration(volunteer_repo, activity.id, "E1", kst(2026, 3, 5, 9))

        response = client.get(LOTTERY_URL, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["skipped"] is True
        assert body["kstDate"] == "2026-03-10"
        assert volunteer_repo.get_activity(activity.id).status == ActivityStatus.OPEN

    def test_force_runs_outside_hour(self, client, volunteer_repo, fixed_clock):
        fixed_clock.set(datetime(2026, 3, 10, 15, 0))
        activity = make_activity(volunteer_repo, max_participants=5)
        for i in range(3):
            make_registration(volunteer_repo, activity.id, f"E{i}", kst(2026, 3, 5, 9, i))

        response = client.post(f"{LOTTERY_URL}?force=1", headers=AUTH)

        body = response.json()
        assert response.status_code == 200
        assert body["processedActivities"] == 1
        assert body["processedRegistrations"] == 3
        assert body["details"][0]["winners"] == 3
        assert body["details"][0]["rejected"] == 0
        assert len(volunteer_repo.posts) == 1

    def test_force_other_value_does_not_bypass(self, client, fixed_clock):
        fixed_clock.set(datetime(2026, 3, 10, 15, 0))

        body = client.get(f"{LOTTERY_URL}?force=true", headers=AUTH).json()

        assert body["skipped"] is True

    def test_run_hour_with_nothing_due(self, client, fixed_clock):
        body = client.get(LOTTERY_URL, headers=AUTH).json()

        assert body == {
            "success": True,
            "processedActivities": 0,
            "processedRegistrations": 0,
            "message": "오늘 마감되는 모집중 봉사활동이 없습니다.",
        }

    def test_second_call_processes_nothing(self, client, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo)
        make_registration(volunteer_repo, activity.id, "E1", kst(2026, 3, 5, 9))

        first = client.get(LOTTERY_URL, headers=AUTH).json()
        second = client.get(LOTTERY_URL, headers=AUTH).json()

        assert first["processedActivities"] == 1
        assert second["processedActivities"] == 0

    def test_database_failure_is_500(self, client, fixed_clock):
        from spaced_api.api import lottery_routes

        broken = MagicMock(spec=RunScheduledLotteryUseCase)
        broken.execute.side_effect = DatabaseError("연결 실패")
        client.app.dependency_overrides[
            lottery_routes.get_run_scheduled_lottery_use_case
        ] = lambda: broken

        response = client.get(LOTTERY_URL, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "연결 실패"}

    def test_unexpected_failure_is_generic_500(self, client, fixed_clock):
        from spaced_api.api import lottery_routes

        broken = MagicMock(spec=RunScheduledLotteryUseCase)
        broken.execute.side_effect = RuntimeError("boom")
        client.app.dependency_overrides[
            lottery_routes.get_run_scheduled_lottery_use_case
        ] = lambda: broken

        response = client.get(LOTTERY_URL, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "자동 추첨 처리 중 오류가 발생했습니다.",
        }


class TestManualPublish:
    def _url(self, activity_id):
        return f"/api/admin/volunteer/activities/{activity_id}/publish"

    def test_admin_publishes(self, client, admin_headers, volunteer_repo, fixed_clock):
        activity = make_activity(
            volunteer_repo, deadline=date(2026, 5, 1), max_participants=1
        )
        winner = make_registration(volunteer_repo, activity.id, "E1", kst(2026, 3, 5, 9))
        make_registration(volunteer_repo, activity.id, "E2", kst(2026, 3, 5, 10))

        response = client.post(self._url(activity.id), headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "detail": {
                "activityId": activity.id,
                "title": "연탄 나눔",
                "winners": 1,
                "rejected": 1,
                "maxParticipants": 1,
            },
        }
        assert volunteer_repo.get_registration(winner.id).status == RegistrationStatus.CONFIRMED

    def test_non_admin_is_403(self, client, user_headers, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo)

        response = client.post(self._url(activity.id), headers=user_headers)

        assert response.status_code == 403

    def test_anonymous_is_401(self, client, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo)

        assert client.post(self._url(activity.id)).status_code == 401

    def test_unknown_activity_is_404(self, client, admin_headers, fixed_clock):
        response = client.post(self._url(999), headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "봉사활동을 찾을 수 없습니다."

    def test_closed_activity_is_409(self, client, admin_headers, volunteer_repo, fixed_clock):
        activity = make_activity(volunteer_repo, status=ActivityStatus.CLOSED)

        response = client.post(self._url(activity.id), headers=admin_headers)

        assert response.status_code == 409
