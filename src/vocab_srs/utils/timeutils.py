"""Epoch-millisecond time helpers.

All scheduler timestamps are integer milliseconds since the Unix epoch so that
records round-trip unchanged through the JSON snapshot format.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime

MS_PER_DAY = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def days_between(later_ms: int, earlier_ms: int) -> float:
    """Fractional days from ``earlier_ms`` to ``later_ms`` (never negative)."""
    return max(0.0, (later_ms - earlier_ms) / MS_PER_DAY)


def to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def format_ms(ms: int) -> str:
    """Human-readable UTC timestamp, or ``"never"`` for 0."""
    if ms <= 0:
        return "never"
    return to_datetime(ms).strftime("%Y-%m-%d %H:%M")
