"""User ratings for a review attempt."""

from __future__ import annotations

from enum import IntEnum

from vocab_srs.errors import InvalidRatingError


class Rating(IntEnum):
    """How well the learner recalled a card.

    The integer value doubles as the index of the matching initial-stability
    weight, see ``FSRSWeights.initial_stability``.
    """

    AGAIN = 0  # Recall failed
    HARD = 1  # Recalled with serious effort
    GOOD = 2  # Recalled normally
    EASY = 3  # Recalled effortlessly

    @property
    def is_failure(self) -> bool:
        return self is Rating.AGAIN

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: object) -> Rating:
        """Validate and convert a raw rating.

        Accepts a Rating, an int 0-3, or a case-insensitive name
        ("again", "hard", "good", "easy").

        Raises:
            InvalidRatingError: For anything else (including bools and floats).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRatingError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRatingError(value) from None
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        raise InvalidRatingError(value)
