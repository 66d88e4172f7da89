"""
===============================================================================
TARJETA CRC — spaced_api/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, clock, casos de uso) siguiendo DIP.
  - Exponer factories para FastAPI (Depends).
  - Mantener singletons con caching (lru_cache).
  - Centralizar decisiones runtime basadas en Settings (config).

Colaboradores:
  - spaced_api.crosscutting.config.get_settings
  - spaced_api.domain.repositories.* (puertos)
  - spaced_api.infrastructure.repositories.* (implementaciones)
  - spaced_api.application.usecases.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO debe depender de FastAPI (solo expone factories).
  - Los tests sobreescriben factories con app.dependency_overrides o
    limpian los caches con reset_container().
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases.lottery import (
    DrawActivityUseCase,
    PublishActivityUseCase,
    RunScheduledLotteryUseCase,
)
from .application.usecases.volunteer import (
    CreateActivityUseCase,
    DeleteActivityUseCase,
    ListActivitiesUseCase,
    ListActivityRegistrationsUseCase,
    ListMyRegistrationsUseCase,
    ListWinnersUseCase,
    RegisterForActivityUseCase,
    UnpublishActivityUseCase,
    VolunteerStatsUseCase,
)
from .crosscutting.clock import Clock, SystemClock
from .crosscutting.config import get_settings
from .domain.repositories import UserRepository, VolunteerRepository
from .infrastructure.repositories import (
    InMemoryUserRepository,
    InMemoryVolunteerRepository,
    PostgresUserRepository,
    PostgresVolunteerRepository,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """
    Determina si estamos en entorno de test.

    Regla:
      - app_env ∈ {"test", "testing", "ci"} => se favorecen in-memory adapters.
    """
    env = get_settings().app_env.strip().lower()
    return env in {"test", "testing", "ci"}


# =============================================================================
# Repositorios + Clock (singletons)
# =============================================================================

# R: reemplazos explícitos (tests / scripts); reset_container() los descarta.
_volunteer_repository_override: VolunteerRepository | None = None
_clock_override: Clock | None = None


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    if _is_test_env():
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache(maxsize=1)
def _build_volunteer_repository() -> VolunteerRepository:
    if _is_test_env():
        return InMemoryVolunteerRepository()
    return PostgresVolunteerRepository()


def get_volunteer_repository() -> VolunteerRepository:
    if _volunteer_repository_override is not None:
        return _volunteer_repository_override
    return _build_volunteer_repository()


@lru_cache(maxsize=1)
def _build_clock() -> Clock:
    return SystemClock(get_settings().lottery_time_zone)


def get_clock() -> Clock:
    if _clock_override is not None:
        return _clock_override
    return _build_clock()


def override_volunteer_repository(repository: VolunteerRepository | None) -> None:
    global _volunteer_repository_override
    _volunteer_repository_override = repository


def override_clock(clock: Clock | None) -> None:
    global _clock_override
    _clock_override = clock


# =============================================================================
# Casos de uso (baratos: se construyen por request)
# =============================================================================


def get_draw_activity_use_case() -> DrawActivityUseCase:
    return DrawActivityUseCase(get_volunteer_repository(), get_clock())


def get_run_scheduled_lottery_use_case() -> RunScheduledLotteryUseCase:
    return RunScheduledLotteryUseCase(
        get_volunteer_repository(),
        get_clock(),
        get_draw_activity_use_case(),
        run_hour=get_settings().lottery_run_hour,
    )


def get_publish_activity_use_case() -> PublishActivityUseCase:
    return PublishActivityUseCase(
        get_volunteer_repository(),
        get_clock(),
        get_draw_activity_use_case(),
    )


def get_create_activity_use_case() -> CreateActivityUseCase:
    return CreateActivityUseCase(get_volunteer_repository(), get_clock())


def get_list_activities_use_case() -> ListActivitiesUseCase:
    return ListActivitiesUseCase(get_volunteer_repository())


def get_register_for_activity_use_case() -> RegisterForActivityUseCase:
    return RegisterForActivityUseCase(get_volunteer_repository(), get_clock())


def get_list_my_registrations_use_case() -> ListMyRegistrationsUseCase:
    return ListMyRegistrationsUseCase(get_volunteer_repository())


def get_unpublish_activity_use_case() -> UnpublishActivityUseCase:
    return UnpublishActivityUseCase(get_volunteer_repository())


def get_volunteer_stats_use_case() -> VolunteerStatsUseCase:
    return VolunteerStatsUseCase(get_volunteer_repository(), get_clock())


def get_list_activity_registrations_use_case() -> ListActivityRegistrationsUseCase:
    return ListActivityRegistrationsUseCase(get_volunteer_repository())


def get_list_winners_use_case() -> ListWinnersUseCase:
    return ListWinnersUseCase(get_volunteer_repository())


def get_delete_activity_use_case() -> DeleteActivityUseCase:
    return DeleteActivityUseCase(get_volunteer_repository())


def reset_container() -> None:
    """Limpia los singletons (tests)."""
    get_user_repository.cache_clear()
    _build_volunteer_repository.cache_clear()
    _build_clock.cache_clear()
    override_volunteer_repository(None)
    override_clock(None)
