"""
===============================================================================
TARJETA CRC — domain/lottery_policy.py
===============================================================================

Módulo:
    Política del Sorteo (prioridad + cupo)

Responsabilidades:
    - Calcular el puntaje de prioridad de cada postulante.
    - Ordenar candidatos: menos participaciones confirmadas en el año primero,
      luego el que se postuló antes, luego el id de inscripción.
    - Partir candidatos en ganadores/perdedores respetando el cupo.
    - Ser 100% testeable: funciones puras, inputs explícitos.

Colaboradores:
    - domain.entities.VolunteerRegistration
    - application/usecases/lottery/draw_activity.py: aplica la decisión.

Reglas (intención):
    - Si los pendientes entran en el cupo, todos ganan (sin rechazados).
    - Inscripciones sin employee_id nunca acumulan prioridad (puntaje 0).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .entities import VolunteerRegistration


@dataclass(frozen=True, slots=True)
class DrawOutcome:
    """Resultado puro del sorteo para una actividad."""

    winners: tuple[VolunteerRegistration, ...]
    losers: tuple[VolunteerRegistration, ...]

    @property
    def winner_ids(self) -> list[int]:
        return [r.id for r in self.winners if r.id is not None]

    @property
    def loser_ids(self) -> list[int]:
        return [r.id for r in self.losers if r.id is not None]

    @property
    def total(self) -> int:
        return len(self.winners) + len(self.losers)


def priority_score(
    registration: VolunteerRegistration, confirmed_counts: Mapping[str, int]
) -> int:
    """Participaciones confirmadas del empleado en el año (menor = más prioridad)."""
    if not registration.employee_id:
        return 0
    return int(confirmed_counts.get(registration.employee_id, 0))


def rank_candidates(
    candidates: Iterable[VolunteerRegistration],
    confirmed_counts: Mapping[str, int],
) -> list[VolunteerRegistration]:
    """Orden total determinístico: (puntaje, created_at, id)."""
    return sorted(
        candidates,
        key=lambda r: (
            priority_score(r, confirmed_counts),
            r.created_at,
            r.id if r.id is not None else 0,
        ),
    )


def draw(
    candidates: Sequence[VolunteerRegistration],
    max_participants: int,
    confirmed_counts: Mapping[str, int],
) -> DrawOutcome:
    capacity = max(0, int(max_participants or 0))
    ranked = rank_candidates(candidates, confirmed_counts)

    if len(ranked) <= capacity:
        return DrawOutcome(winners=tuple(ranked), losers=())

    return DrawOutcome(
        winners=tuple(ranked[:capacity]),
        losers=tuple(ranked[capacity:]),
    )
