"""Scheduler parameters: FSRS weights, retention target and interval cap."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from vocab_srs.core.rating import Rating

# FSRS-5 defaults (19 parameters)
DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.4072, 1.1829, 3.1262, 15.4722,  # initial stability per rating
    7.2102,  # initial difficulty mean
    0.5316,  # initial difficulty scale
    1.0651,  # difficulty mean reversion
    0.0046,  # difficulty step per rating
    1.5071,  # success: scale (exponent of e)
    0.1170,  # success: stability decay
    1.0507,  # success: retrievability gain
    1.9946,  # failure: scale
    0.0957,  # failure: difficulty decay
    0.2975,  # failure: stability exponent
    2.2042,  # failure: retrievability gain
    0.2407,  # hard penalty
    2.9466,  # easy bonus
    0.5034,  # reserved
    0.6567,  # reserved
)  # fmt: skip

WEIGHT_COUNT = len(DEFAULT_WEIGHTS)

DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MAX_INTERVAL_DAYS = 3650


@dataclass(frozen=True)
class FSRSWeights:
    """The FSRS weight vector with every weight exposed by its role.

    Raises:
        ValueError: If the vector does not have exactly 19 finite numbers.
    """

    values: tuple[float, ...] = DEFAULT_WEIGHTS

    def __post_init__(self) -> None:
        if len(self.values) != WEIGHT_COUNT:
            raise ValueError(f"Expected {WEIGHT_COUNT} weights, got {len(self.values)}")
        for v in self.values:
            if isinstance(v, bool) or not isinstance(v, int | float) or not math.isfinite(v):
                raise ValueError(f"Weight {v!r} is not a finite number")

    @classmethod
    def from_sequence(cls, values: Sequence[Any]) -> FSRSWeights:
        return cls(values=tuple(values))

    def initial_stability(self, rating: Rating) -> float:
        return self.values[int(rating)]

    @property
    def initial_difficulty_mean(self) -> float:
        return self.values[4]

    @property
    def initial_difficulty_scale(self) -> float:
        return self.values[5]

    @property
    def difficulty_reversion(self) -> float:
        return self.values[6]

    @property
    def difficulty_step(self) -> float:
        return self.values[7]

    @property
    def success_scale(self) -> float:
        return self.values[8]

    @property
    def success_stability_decay(self) -> float:
        return self.values[9]

    @property
    def success_retrievability_gain(self) -> float:
        return self.values[10]

    @property
    def failure_scale(self) -> float:
        return self.values[11]

    @property
    def failure_difficulty_decay(self) -> float:
        return self.values[12]

    @property
    def failure_stability_exponent(self) -> float:
        return self.values[13]

    @property
    def failure_retrievability_gain(self) -> float:
        return self.values[14]

    @property
    def hard_penalty(self) -> float:
        return self.values[15]

    @property
    def easy_bonus(self) -> float:
        return self.values[16]

    def to_list(self) -> list[float]:
        return list(self.values)


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Per-installation scheduler settings.

    Attributes:
        weights: FSRS weight vector
        request_retention: Recall probability the intervals aim for, in (0, 1)
        max_interval_days: Upper bound for any interval, > 0

    Raises:
        ValueError: If retention or the interval cap are out of range.
    """

    weights: FSRSWeights = field(default_factory=FSRSWeights)
    request_retention: float = DEFAULT_REQUEST_RETENTION
    max_interval_days: int = DEFAULT_MAX_INTERVAL_DAYS

    def __post_init__(self) -> None:
        if not 0 < self.request_retention < 1:
            raise ValueError(f"request_retention must be in (0, 1), got {self.request_retention}")
        if self.max_interval_days <= 0:
            raise ValueError(f"max_interval_days must be > 0, got {self.max_interval_days}")

    def with_updates(self, **kwargs: Any) -> SchedulerConfig:
        """Create a new config with updated values."""
        return SchedulerConfig(
            weights=kwargs.get("weights", self.weights),
            request_retention=kwargs.get("request_retention", self.request_retention),
            max_interval_days=kwargs.get("max_interval_days", self.max_interval_days),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "weights": self.weights.to_list(),
            "request_retention": self.request_retention,
            "max_interval_days": self.max_interval_days,
        }
