"""
Name: Lottery Policy Tests

Responsibilities:
  - Priority ranking (fewest confirmed this year, then earliest, then id)
  - Capacity split into winners/losers
"""

import itertools
import random
from datetime import datetime

import pytest

from spaced_api.domain.entities import VolunteerRegistration
from spaced_api.domain.lottery_policy import draw, priority_score, rank_candidates

pytestmark = pytest.mark.unit


def reg(rid: int, employee_id: str, hour: int, minute: int = 0) -> VolunteerRegistration:
    return VolunteerRegistration(
        id=rid,
        activity_id=1,
        employee_id=employee_id,
        user_name=f"user-{rid}",
        created_at=datetime(2026, 3, 5, hour, minute),
    )


class TestPriorityScore:
    def test_counts_lookup(self):
        assert priority_score(reg(1, "E1", 9), {"E1": 2}) == 2

    def test_unknown_employee_scores_zero(self):
        assert priority_score(reg(1, "E9", 9), {"E1": 2}) == 0

    def test_blank_employee_scores_zero(self):
        assert priority_score(reg(1, "", 9), {"": 5}) == 0


class TestDraw:
    def test_oversubscribed_picks_lowest_score_then_earliest(self):
        r1 = reg(1, "E1", 10, 0)
        r2 = reg(2, "E2", 10, 5)
        r3 = reg(3, "E3", 9, 0)
        r4 = reg(4, "E4", 8, 0)
        r5 = reg(5, "E5", 10, 10)
        counts = {"E3": 1, "E4": 2}

        outcome = draw([r4, r3, r5, r2, r1], 3, counts)

        assert outcome.winner_ids == [1, 2, 5]
        assert outcome.loser_ids == [3, 4]

    def test_undersubscribed_everyone_wins(self):
        candidates = [reg(1, "E1", 9), reg(2, "E2", 10), reg(3, "E3", 11)]

        outcome = draw(candidates, 5, {"E1": 4})

        assert len(outcome.winners) == 3
        assert outcome.losers == ()

    def test_exactly_full_everyone_wins(self):
        candidates = [reg(1, "E1", 9), reg(2, "E2", 10)]

        outcome = draw(candidates, 2, {})

        assert outcome.loser_ids == []

    def test_zero_capacity_rejects_everyone(self):
        outcome = draw([reg(1, "E1", 9), reg(2, "E2", 10)], 0, {})

        assert outcome.winner_ids == []
        assert outcome.loser_ids == [1, 2]

    def test_negative_capacity_is_zero(self):
        outcome = draw([reg(1, "E1", 9)], -3, {})

        assert outcome.winner_ids == []

    def test_id_breaks_full_ties(self):
        a = reg(7, "E1", 9)
        b = reg(3, "E2", 9)

        assert [r.id for r in rank_candidates([a, b], {})] == [3, 7]

    def test_blank_employee_has_top_priority_score(self):
        veteran = reg(1, "E1", 8)
        anonymous = reg(2, "", 12)

        outcome = draw([veteran, anonymous], 1, {"E1": 3})

        assert outcome.winner_ids == [2]


class TestDrawProperties:
    @pytest.mark.parametrize("seed", range(5))
    def test_capacity_and_ordering_hold(self, seed):
        rng = random.Random(seed)
        candidates = [
            reg(i, f"E{i}", rng.randint(8, 17), rng.randint(0, 59)) for i in range(1, 13)
        ]
        counts = {f"E{i}": rng.randint(0, 3) for i in range(1, 13)}
        capacity = rng.randint(0, 12)

        outcome = draw(candidates, capacity, counts)

        assert len(outcome.winners) == min(capacity, len(candidates))
        assert outcome.total == len(candidates)
        for winner, loser in itertools.product(outcome.winners, outcome.losers):
            w_score = priority_score(winner, counts)
            l_score = priority_score(loser, counts)
            assert w_score <= l_score
            if w_score == l_score:
                assert winner.created_at <= loser.created_at
