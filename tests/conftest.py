"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure an isolated test environment (settings, rate limiter, container)
  - Provide in-memory repositories and a fixed clock
  - Provide an API client and session-cookie helpers

Collaborators:
  - pytest: Test framework
  - fastapi.testclient.TestClient
  - spaced_api.container: singletons reset per test

Notes:
  - `.env` loading is disabled so local files never leak into tests
  - TestClient talks to "testserver", which the cookie policy treats as https
    (Secure cookie); tests send the session cookie explicitly in a header
"""

from __future__ import annotations

import os
from datetime import datetime
from uuid import uuid4

import pytest

from spaced_api.crosscutting import config as app_config

app_config.Settings.model_config["env_file"] = None

os.environ.setdefault("APP_ENV", "test")

from spaced_api import container  # noqa: E402
from spaced_api.crosscutting.clock import FixedClock  # noqa: E402
from spaced_api.crosscutting.config import get_settings  # noqa: E402
from spaced_api.crosscutting.rate_limit import reset_rate_limiter  # noqa: E402
from spaced_api.domain.entities import (  # noqa: E402
    ActivityStatus,
    VolunteerActivity,
    VolunteerRegistration,
)
from spaced_api.identity.passwords import hash_password  # noqa: E402
from spaced_api.identity.sessions import create_session_token  # noqa: E402
from spaced_api.identity.users import User  # noqa: E402
from spaced_api.infrastructure.db.pool import reset_pool  # noqa: E402

TEST_SESSION_SECRET = "test-session-secret-0123456789-abcdef"
TEST_CRON_SECRET = "test-cron-secret"
SEOUL = "Asia/Seoul"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Environment isolation
# ============================================================================


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """R: Fresh settings, rate limiter, pool and singletons for every test."""
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("API_SESSION_SECRET", TEST_SESSION_SECRET)
    monkeypatch.setenv("CRON_SECRET", TEST_CRON_SECRET)
    for name in (
        "DATABASE_URL",
        "REDIS_URL",
        "ALLOWED_ORIGINS",
        "METRICS_REQUIRE_AUTH",
        "LOTTERY_RUN_HOUR",
        "LOTTERY_TIME_ZONE",
        "LOGIN_RATE_LIMIT_MAX",
        "LOGIN_RATE_LIMIT_WINDOW_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    reset_rate_limiter()
    reset_pool()
    container.reset_container()
    yield
    get_settings.cache_clear()
    reset_rate_limiter()
    reset_pool()
    container.reset_container()


# ============================================================================
# Clock + repositories
# ============================================================================


@pytest.fixture
def fixed_clock() -> FixedClock:
    """R: 2026-03-10 09:00 KST, wired into the container."""
    clock = FixedClock(datetime(2026, 3, 10, 9, 0), tz=SEOUL)
    container.override_clock(clock)
    return clock


@pytest.fixture
def volunteer_repo():
    return container.get_volunteer_repository()


@pytest.fixture
def user_repo():
    return container.get_user_repository()


# ============================================================================
# Factories
# ============================================================================


def kst(*args) -> datetime:
    """R: Aware datetime in Asia/Seoul."""
    return FixedClock(datetime(*args), tz=SEOUL).now()


def make_activity(repo, **overrides) -> VolunteerActivity:
    fields = dict(
        id=None,
        title="연탄 나눔",
        description="",
        date=datetime(2026, 3, 21).date(),
        deadline=datetime(2026, 3, 10).date(),
        max_participants=3,
        status=ActivityStatus.OPEN,
    )
    fields.update(overrides)
    return repo.create_activity(VolunteerActivity(**fields))


def make_registration(
    repo, activity_id: int, employee_id: str, created_at: datetime, **overrides
) -> VolunteerRegistration:
    fields = dict(
        id=None,
        activity_id=activity_id,
        employee_id=employee_id,
        user_name=overrides.pop("user_name", f"user-{employee_id}"),
        created_at=created_at,
    )
    fields.update(overrides)
    return repo.create_registration(VolunteerRegistration(**fields))


def make_user(repo, nickname: str = "alice", password: str = "pw-1234", **overrides):
    fields = dict(
        id=uuid4(),
        nickname=nickname,
        password_hash=hash_password(password),
        employee_id="E100",
        is_admin=False,
    )
    fields.update(overrides)
    return repo.create_user(User(**fields))


# ============================================================================
# API client + cookies
# ============================================================================


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from spaced_api.api.main import create_app

    return TestClient(create_app(), raise_server_exceptions=False)


def session_headers(
    *, uid: str | None = None, nickname: str = "alice", is_admin: bool = False
) -> dict[str, str]:
    token = create_session_token(
        {"uid": uid or str(uuid4()), "nickname": nickname, "isAdmin": is_admin},
        TEST_SESSION_SECRET,
        3600,
    )
    return {"Cookie": f"{get_settings().session_cookie_name}={token}"}


@pytest.fixture
def user_headers() -> dict[str, str]:
    return session_headers(nickname="alice")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return session_headers(nickname="admin", is_admin=True)
