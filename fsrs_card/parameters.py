"""
fsrs_card.parameters
--------------------

This module defines the Parameters class as well as the constants used in the model's calculations.

Classes:
    Parameters: The model weights and scheduling policy of the FSRS scheduler.
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypedDict
import json
import math
from typing_extensions import Self
from fsrs_card.rating import Rating

DEFAULT_W = (
    0.4,
    0.6,
    2.4,
    5.8,
    4.93,
    0.94,
    0.86,
    0.01,
    1.49,
    0.14,
    0.94,
    2.18,
    0.05,
    0.34,
    1.26,
    0.29,
    2.61,
)

DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500

# forgetting curve: R(t, S) = (1 + FACTOR * t / S) ** DECAY
DECAY = -1.0
FACTOR = 1 / 9

STABILITY_MIN = 0.1
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0


class ParametersDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Parameters object.
    """

    request_retention: float
    maximum_interval: int
    w: list[float]
    enable_fuzz: bool


@dataclass(init=False)
class Parameters:
    """
    The model weights and scheduling policy used to schedule cards.

    Attributes:
        request_retention: The target probability of recalling a card when it comes due.
        maximum_interval: The maximum number of days a card can be scheduled into the future.
        w: The 17 model weights.
        enable_fuzz: Whether to apply a small amount of random 'fuzz' to Review intervals.
    """

    request_retention: float
    maximum_interval: int
    w: tuple[float, ...]
    enable_fuzz: bool

    def __init__(
        self,
        request_retention: float = DEFAULT_REQUEST_RETENTION,
        maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL,
        w: Sequence[float] = DEFAULT_W,
        enable_fuzz: bool = False,
    ) -> None:
        self._validate(
            request_retention=request_retention,
            maximum_interval=maximum_interval,
            w=w,
        )

        self.request_retention = request_retention
        self.maximum_interval = maximum_interval
        self.w = tuple(w)
        self.enable_fuzz = enable_fuzz

    def _validate(
        self,
        *,
        request_retention: float,
        maximum_interval: int,
        w: Sequence[float],
    ) -> None:
        error_messages = []

        if len(w) != len(DEFAULT_W):
            error_messages.append(f"Expected {len(DEFAULT_W)} weights, got {len(w)}.")

        if not 0 < request_retention <= 1:
            error_messages.append(
                f"request_retention = {request_retention} is out of bounds: (0, 1]"
            )

        if maximum_interval < 1:
            error_messages.append(
                f"maximum_interval = {maximum_interval} must be at least 1 day"
            )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more parameters are invalid:\n" + "\n".join(error_messages)
            )

    def init_stability(self, rating: Rating) -> float:
        return self.clamp_stability(self.w[rating - 1])

    def init_difficulty(self, rating: Rating) -> float:
        return self.clamp_difficulty(self.w[4] - self.w[5] * (rating - 3))

    def forgetting_curve(self, elapsed_days: float, stability: float) -> float:
        """
        Predicted probability of recall after `elapsed_days` for a memory of the given stability.
        """

        return (1 + FACTOR * elapsed_days / stability) ** DECAY

    def next_interval(self, stability: float) -> int:
        """
        Calculates the number of days until the card's retrievability drops to request_retention.

        Args:
            stability: The card's stability after the review.

        Returns:
            int: The next interval in whole days, between 1 and maximum_interval.
        """

        next_interval = (stability / FACTOR) * (
            (self.request_retention ** (1 / DECAY)) - 1
        )

        next_interval = round(next_interval)  # intervals are full days

        # must be at least 1 day long
        next_interval = max(next_interval, 1)

        # can not be longer than the maximum interval
        next_interval = min(next_interval, self.maximum_interval)

        return next_interval

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        next_difficulty = difficulty - self.w[6] * (rating - 3)
        next_difficulty = self.mean_reversion(self.w[4], next_difficulty)

        return self.clamp_difficulty(next_difficulty)

    def mean_reversion(self, init: float, current: float) -> float:
        return self.w[7] * init + (1 - self.w[7]) * current

    def next_recall_stability(
        self,
        difficulty: float,
        stability: float,
        retrievability: float,
        rating: Rating,
    ) -> float:
        """
        Stability after a successful recall (Hard, Good or Easy).

        Lower retrievability at review time yields a larger increase. Hard applies
        the w[15] penalty and Easy the w[16] bonus.
        """

        hard_penalty = self.w[15] if rating == Rating.Hard else 1
        easy_bonus = self.w[16] if rating == Rating.Easy else 1

        return stability * (
            1
            + (math.e ** (self.w[8]))
            * (11 - difficulty)
            * (stability ** -self.w[9])
            * ((math.e ** ((1 - retrievability) * self.w[10])) - 1)
            * hard_penalty
            * easy_bonus
        )

    def next_forget_stability(
        self, difficulty: float, stability: float, retrievability: float
    ) -> float:
        """
        Stability after a lapse (Again).
        """

        return (
            self.w[11]
            * (difficulty ** -self.w[12])
            * (((stability + 1) ** (self.w[13])) - 1)
            * (math.e ** ((1 - retrievability) * self.w[14]))
        )

    def clamp_difficulty(self, difficulty: float) -> float:
        return min(max(difficulty, MIN_DIFFICULTY), MAX_DIFFICULTY)

    def clamp_stability(self, stability: float) -> float:
        return max(stability, STABILITY_MIN)

    def to_dict(self) -> ParametersDict:
        """
        Returns a dictionary representation of the Parameters object.

        Returns:
            ParametersDict: A dictionary representation of the Parameters object.
        """

        return {
            "request_retention": self.request_retention,
            "maximum_interval": self.maximum_interval,
            "w": list(self.w),
            "enable_fuzz": self.enable_fuzz,
        }

    @classmethod
    def from_dict(cls, source_dict: ParametersDict) -> Self:
        """
        Creates a Parameters object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Parameters object.

        Returns:
            Self: A Parameters object created from the provided dictionary.
        """

        return cls(
            request_retention=source_dict["request_retention"],
            maximum_interval=source_dict["maximum_interval"],
            w=source_dict["w"],
            enable_fuzz=source_dict.get("enable_fuzz", False),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Parameters object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Parameters object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Parameters object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Parameters object.

        Returns:
            Self: A Parameters object created from the JSON string.
        """

        source_dict: ParametersDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Parameters", "DEFAULT_W"]
