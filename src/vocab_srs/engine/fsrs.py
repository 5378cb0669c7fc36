"""FSRS scheduler - pure spaced-repetition math.

Computes the next memory state and review interval of a card from its
current state, a rating and the time elapsed since the last review.

Key quantities:
- Stability (S): days until recall probability decays to the target
- Difficulty (D): 1-10, how hard the card is to stabilize
- Retrievability (R): power-law forgetting curve R = (1 + F*t/S)^DECAY

No I/O and no clock reads unless ``now`` is omitted from ``schedule``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.rating import Rating
from vocab_srs.core.scheduler_config import SchedulerConfig
from vocab_srs.utils.timeutils import MS_PER_DAY, now_ms

DECAY = -0.5
FACTOR = 19 / 81

S_MIN = 0.01
D_MIN = 1.0
D_MAX = 10.0

# A failed card is shown again after this many days, whatever its stability
FAILURE_INTERVAL_DAYS = 1


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


@dataclass(frozen=True)
class ScheduleResult:
    """New scheduling fields for a card after one rating."""

    stability: float
    difficulty: float
    due: int
    interval: int
    reps: int
    lapses: int
    state: CardState

    def apply_to(self, card: CardRecord, reviewed_at: int) -> CardRecord:
        """Return ``card`` with these fields and ``last_reviewed`` set."""
        return card.with_updates(
            stability=self.stability,
            difficulty=self.difficulty,
            due=self.due,
            reps=self.reps,
            lapses=self.lapses,
            state=self.state,
            last_reviewed=reviewed_at,
        )


class FSRSScheduler:
    """FSRS-5 scheduler bound to one set of parameters."""

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        self._config = config or SchedulerConfig()
        self._w = self._config.weights

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    # ---- Initial state (first review) ----

    def init_stability(self, rating: Rating) -> float:
        return max(self._w.initial_stability(rating), S_MIN)

    def init_difficulty(self, rating: Rating) -> float:
        # D0(G) = w4 - e^(w5 * (G - 1)) + 1
        d0 = (
            self._w.initial_difficulty_mean
            - math.exp(self._w.initial_difficulty_scale * (int(rating) - 1))
            + 1
        )
        return _clamp(d0, D_MIN, D_MAX)

    # ---- Updates ----

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        """Mean-revert towards the EASY baseline, shifted by the rating.

        D' = w6 * D0(EASY) + (1 - w6) * (D - w7 * (G - 3))
        """
        w = self._w
        easy_baseline = self.init_difficulty(Rating.EASY)
        shifted = difficulty - w.difficulty_step * (int(rating) - 3)
        d = w.difficulty_reversion * easy_baseline + (1 - w.difficulty_reversion) * shifted
        return _clamp(d, D_MIN, D_MAX)

    def retrievability(self, elapsed_days: float, stability: float) -> float:
        if stability <= 0 or elapsed_days <= 0:
            return 1.0
        return math.pow(1 + FACTOR * elapsed_days / stability, DECAY)

    def next_stability_success(
        self,
        difficulty: float,
        stability: float,
        retrievability: float,
        rating: Rating,
    ) -> float:
        """Grow stability after a successful recall.

        S' = S * (e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * hard * easy + 1)
        """
        w = self._w
        hard_penalty = w.hard_penalty if rating is Rating.HARD else 1.0
        easy_bonus = w.easy_bonus if rating is Rating.EASY else 1.0
        growth = (
            math.exp(w.success_scale)
            * (11 - difficulty)
            * math.pow(stability, -w.success_stability_decay)
            * (math.exp(w.success_retrievability_gain * (1 - retrievability)) - 1)
            * hard_penalty
            * easy_bonus
        )
        return max(stability * (growth + 1), S_MIN)

    def next_stability_fail(
        self,
        difficulty: float,
        stability: float,
        retrievability: float,
    ) -> float:
        """Shrink stability after a lapse; never above the prior stability.

        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))
        """
        w = self._w
        s_fail = (
            w.failure_scale
            * math.pow(difficulty, -w.failure_difficulty_decay)
            * (math.pow(stability + 1, w.failure_stability_exponent) - 1)
            * math.exp(w.failure_retrievability_gain * (1 - retrievability))
        )
        return max(min(s_fail, stability), S_MIN)

    def interval_from_stability(self, stability: float) -> int:
        """Whole days until recall probability falls to the retention target.

        I = S / F * (R^(1 / DECAY) - 1), rounded and clamped to [1, max].
        """
        if stability <= 0:
            return 1
        target = self._config.request_retention
        interval = (stability / FACTOR) * (math.pow(target, 1 / DECAY) - 1)
        return int(_clamp(_round_half_up(interval), 1, self._config.max_interval_days))

    # ---- Main entry point ----

    def schedule(
        self,
        card: CardRecord,
        rating: Rating,
        elapsed_days: float,
        now: int | None = None,
    ) -> ScheduleResult:
        """Compute the card's next state after ``rating``.

        Args:
            card: Current record (NEW or REVIEW)
            rating: A validated rating
            elapsed_days: Days since ``card.last_reviewed`` (0 for new cards)
            now: Epoch ms used for ``due``; defaults to the wall clock

        Returns:
            ScheduleResult with the new memory state, interval and due time
        """
        if now is None:
            now = now_ms()

        if card.state is CardState.NEW:
            stability = self.init_stability(rating)
            difficulty = self.init_difficulty(rating)
            reps = 1
            lapses = 1 if rating.is_failure else 0
        else:
            r = self.retrievability(elapsed_days, card.stability)
            difficulty = self.next_difficulty(card.difficulty, rating)
            reps = card.reps + 1
            lapses = card.lapses
            if rating.is_failure:
                stability = self.next_stability_fail(difficulty, card.stability, r)
                lapses += 1
            else:
                stability = self.next_stability_success(difficulty, card.stability, r, rating)

        if rating.is_failure:
            interval = FAILURE_INTERVAL_DAYS
        else:
            interval = self.interval_from_stability(stability)

        return ScheduleResult(
            stability=stability,
            difficulty=difficulty,
            due=now + interval * MS_PER_DAY,
            interval=interval,
            reps=reps,
            lapses=lapses,
            state=CardState.REVIEW,
        )


def _round_half_up(value: float) -> float:
    # Python's round() is banker's rounding; intervals round .5 upwards
    return math.floor(value + 0.5)
