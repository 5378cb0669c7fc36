"""Scheduler settings persisted in the meta store.

Loads the FSRS weights, retention target and interval cap, seeding
defaults on first use and recovering from corrupt values, and keeps an
``FSRSScheduler`` built from the current values.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from vocab_srs.core.scheduler_config import (
    DEFAULT_MAX_INTERVAL_DAYS,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    FSRSWeights,
    SchedulerConfig,
)
from vocab_srs.engine.fsrs import FSRSScheduler
from vocab_srs.errors import CorruptConfigError

if TYPE_CHECKING:
    from vocab_srs.storage.base import SRSStorage

logger = logging.getLogger(__name__)

# Meta keys (shared with browser clients of the same store)
WEIGHTS_KEY = "fsrs_weights"
RETENTION_KEY = "requestRetention"
MAX_INTERVAL_KEY = "maxIntervalDays"

# Ranges accepted from the settings panel
RETENTION_RANGE = (0.80, 0.95)
MAX_INTERVAL_RANGE = (30, 36500)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


def parse_weights(raw: Any) -> FSRSWeights:
    """Validate a stored weight vector.

    Raises:
        CorruptConfigError: If it is not a list of 19 finite numbers.
    """
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        raise CorruptConfigError(f"{WEIGHTS_KEY} is not a list: {raw!r}")
    try:
        return FSRSWeights.from_sequence(raw)
    except ValueError as e:
        raise CorruptConfigError(f"{WEIGHTS_KEY} is malformed: {e}") from e


def parse_retention(raw: Any) -> float:
    if not _is_number(raw) or not 0 < raw < 1:
        raise CorruptConfigError(f"{RETENTION_KEY} must be a number in (0, 1), got {raw!r}")
    return float(raw)


def parse_max_interval(raw: Any) -> int:
    if not _is_number(raw) or raw < 1 or raw != int(raw):
        raise CorruptConfigError(f"{MAX_INTERVAL_KEY} must be a positive integer, got {raw!r}")
    return int(raw)


class SchedulerSettings:
    """Scheduler configuration backed by an ``SRSStorage`` meta store.

    Use ``await SchedulerSettings.load(storage)``; the constructor alone
    holds defaults and reads nothing.
    """

    def __init__(self, storage: SRSStorage) -> None:
        self._storage = storage
        self._config = SchedulerConfig()
        self._scheduler = FSRSScheduler(self._config)

    @classmethod
    async def load(cls, storage: SRSStorage) -> SchedulerSettings:
        settings = cls(storage)
        await settings.reload()
        return settings

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def scheduler(self) -> FSRSScheduler:
        return self._scheduler

    async def reload(self) -> SchedulerConfig:
        """Read the stored values, seeding any that are absent.

        A corrupt value is replaced by its default for this process only
        and a warning is logged; the stored value is left as is.
        """
        weights = await self._read(WEIGHTS_KEY, parse_weights, list(DEFAULT_WEIGHTS))
        retention = await self._read(RETENTION_KEY, parse_retention, DEFAULT_REQUEST_RETENTION)
        max_interval = await self._read(
            MAX_INTERVAL_KEY, parse_max_interval, DEFAULT_MAX_INTERVAL_DAYS
        )

        self._apply(
            SchedulerConfig(
                weights=weights,
                request_retention=retention,
                max_interval_days=max_interval,
            )
        )
        return self._config

    async def _read(self, key: str, parse: Callable[[Any], Any], default: Any) -> Any:
        raw = await self._storage.get_meta(key)
        if raw is None:
            await self._storage.set_meta(key, default)
            logger.debug("Seeded scheduler setting %s", key)
            return parse(default)
        try:
            return parse(raw)
        except CorruptConfigError as e:
            logger.warning("Ignoring corrupt scheduler setting, using default: %s", e)
            return parse(default)

    async def save(
        self,
        request_retention: float | None = None,
        max_interval_days: int | None = None,
        weights: Sequence[float] | None = None,
    ) -> SchedulerConfig:
        """Validate, persist and apply new settings.

        Omitted arguments keep their current value.

        Raises:
            ValueError: If a value is outside the accepted range (nothing
                is persisted in that case).
        """
        config = self._config
        if request_retention is not None:
            lo, hi = RETENTION_RANGE
            if not _is_number(request_retention) or not lo <= request_retention <= hi:
                raise ValueError(
                    f"Retention must be between {lo:.2f} and {hi:.2f}, got {request_retention!r}"
                )
            config = config.with_updates(request_retention=float(request_retention))
        if max_interval_days is not None:
            lo_days, hi_days = MAX_INTERVAL_RANGE
            if (
                isinstance(max_interval_days, bool)
                or not isinstance(max_interval_days, int)
                or not lo_days <= max_interval_days <= hi_days
            ):
                raise ValueError(
                    f"Max interval must be an integer between {lo_days} and {hi_days} days, "
                    f"got {max_interval_days!r}"
                )
            config = config.with_updates(max_interval_days=max_interval_days)
        if weights is not None:
            config = config.with_updates(weights=FSRSWeights.from_sequence(weights))

        await self._storage.set_meta(WEIGHTS_KEY, config.weights.to_list())
        await self._storage.set_meta(RETENTION_KEY, config.request_retention)
        await self._storage.set_meta(MAX_INTERVAL_KEY, config.max_interval_days)
        self._apply(config)
        logger.info(
            "Saved scheduler settings: retention=%.2f, max_interval=%d",
            config.request_retention,
            config.max_interval_days,
        )
        return config

    def _apply(self, config: SchedulerConfig) -> None:
        self._config = config
        self._scheduler = FSRSScheduler(config)
