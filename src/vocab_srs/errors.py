"""Exception types raised by the scheduler core."""

from __future__ import annotations


class SRSError(Exception):
    """Base class for all vocab-srs errors."""


class StorageUnavailableError(SRSError):
    """The backing store could not be opened or is not initialized.

    Recoverable: calling ``initialize()`` again may succeed.
    """


class InvalidRatingError(SRSError, ValueError):
    """A rating outside Again/Hard/Good/Easy was submitted."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Invalid rating {value!r}: expected 0 (Again), 1 (Hard), 2 (Good) or 3 (Easy)"
        )
        self.value = value


class CorruptConfigError(SRSError):
    """Stored scheduler parameters are malformed.

    Never surfaced to callers: SchedulerSettings substitutes defaults.
    """


class ImportFormatError(SRSError):
    """A snapshot payload is structurally invalid; nothing was written."""


class ConcurrentModificationError(SRSError):
    """A card was changed by someone else since it was read."""

    def __init__(self, card_id: str, expected_version: int) -> None:
        super().__init__(
            f"Card {card_id} was modified concurrently (expected version {expected_version})"
        )
        self.card_id = card_id
        self.expected_version = expected_version


class SessionStateError(SRSError):
    """A review-session command is not valid in the current phase."""
