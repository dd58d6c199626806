"""
fsrs_card.card
--------------

This module defines the Card class.

Classes:
    Card: Represents a flashcard whose memory state is tracked by the scheduler.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from copy import copy
from typing import TypedDict
import json
from typing_extensions import Self
from fsrs_card.rating import Rating
from fsrs_card.review_log import ReviewLog, ReviewLogDict
from fsrs_card.state import State


class CardDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Card object.
    """

    due: str
    stability: float
    difficulty: float
    elapsed_days: int
    scheduled_days: int
    reps: int
    lapses: int
    state: int
    last_review: str
    previous_state: int
    log: ReviewLogDict | None


@dataclass(init=False)
class Card:
    """
    Represents a flashcard in the FSRS system.

    A freshly constructed card is in the New state with all memory values at zero.

    Attributes:
        due: The date and time when the card is due next.
        stability: Core mathematical parameter used for future scheduling. Zero until first scheduled.
        difficulty: Core mathematical parameter used for future scheduling. Zero until first scheduled.
        elapsed_days: Days between the card's two most recent reviews.
        scheduled_days: The interval, in days, the card is currently scheduled with.
        reps: Number of times the card has been reviewed.
        lapses: Number of times the card was forgotten.
        state: The card's current learning state.
        last_review: The date and time of the card's last review.
        previous_state: The card's state before the most recent state transition.
        log: The review log of the most recent review, if any.
    """

    due: datetime
    stability: float
    difficulty: float
    elapsed_days: int
    scheduled_days: int
    reps: int
    lapses: int
    state: State
    last_review: datetime
    previous_state: State
    log: ReviewLog | None

    def __init__(
        self,
        due: datetime | None = None,
        stability: float = 0.0,
        difficulty: float = 0.0,
        elapsed_days: int = 0,
        scheduled_days: int = 0,
        reps: int = 0,
        lapses: int = 0,
        state: State = State.New,
        last_review: datetime | None = None,
        previous_state: State = State.New,
        log: ReviewLog | None = None,
    ) -> None:
        now = datetime.now(timezone.utc)

        if due is None:
            due = now
        self.due = due

        self.stability = stability
        self.difficulty = difficulty
        self.elapsed_days = elapsed_days
        self.scheduled_days = scheduled_days
        self.reps = reps
        self.lapses = lapses
        self.state = state

        if last_review is None:
            last_review = now
        self.last_review = last_review

        self.previous_state = previous_state
        self.log = log

    def get_retrievability(self) -> float:
        """
        Calculates the card's retrievability from its elapsed days and stability.

        The retrievability of a card is the predicted probability that the card is correctly recalled,
        computed as (1 + elapsed_days / (9 * stability)) ** -1.

        Returns:
            float: The retrievability of the card, or 0 if the card has never been scheduled.
        """

        if self.stability <= 0:
            return 0.0

        return (1 + self.elapsed_days / (9 * self.stability)) ** -1

    def update_state(self, rating: Rating) -> None:
        """
        Moves the card to its next learning state for the given rating.

        Args:
            rating: The rating given to the card.
        """

        match self.state:
            case State.New:
                if rating == Rating.Again:
                    self.lapses += 1

                if rating == Rating.Easy:
                    self.state = State.Review
                else:
                    self.state = State.Learning

            case State.Learning | State.Relearning:
                if rating in (Rating.Good, Rating.Easy):
                    self.state = State.Review

            case State.Review:
                if rating == Rating.Again:
                    self.lapses += 1
                    self.state = State.Relearning

    def save_log(self, rating: Rating) -> None:
        """
        Attaches a review log for the given rating, replacing any previous one.

        The log is built from the card's current elapsed_days, scheduled_days, previous_state and
        last_review, so it should be saved before the card's schedule is recomputed.

        Args:
            rating: The rating given to the card.
        """

        self.log = ReviewLog(
            rating=rating,
            elapsed_days=self.elapsed_days,
            scheduled_days=self.scheduled_days,
            state=self.previous_state,
            reviewed_date=self.last_review,
        )

    def copy(self) -> Card:
        """Returns an independent copy of the card. The attached ReviewLog is immutable and shared."""
        return copy(self)

    def to_dict(self) -> CardDict:
        """
        Returns a JSON-serializable dictionary representation of the Card object.

        This method is specifically useful for storing Card objects in a database.

        Returns:
            A dictionary representation of the Card object.
        """

        return {
            "due": self.due.isoformat(),
            "stability": self.stability,
            "difficulty": self.difficulty,
            "elapsed_days": self.elapsed_days,
            "scheduled_days": self.scheduled_days,
            "reps": self.reps,
            "lapses": self.lapses,
            "state": int(self.state),
            "last_review": self.last_review.isoformat(),
            "previous_state": int(self.previous_state),
            "log": self.log.to_dict() if self.log else None,
        }

    @classmethod
    def from_dict(cls, source_dict: CardDict) -> Self:
        """
        Creates a Card object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Card object.

        Returns:
            A Card object created from the provided dictionary.
        """

        return cls(
            due=datetime.fromisoformat(source_dict["due"]),
            stability=float(source_dict["stability"]),
            difficulty=float(source_dict["difficulty"]),
            elapsed_days=int(source_dict["elapsed_days"]),
            scheduled_days=int(source_dict["scheduled_days"]),
            reps=int(source_dict["reps"]),
            lapses=int(source_dict["lapses"]),
            state=State(int(source_dict["state"])),
            last_review=datetime.fromisoformat(source_dict["last_review"]),
            previous_state=State(int(source_dict["previous_state"])),
            log=(
                ReviewLog.from_dict(source_dict["log"])
                if source_dict["log"]
                else None
            ),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Card object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Card object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Card object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Card object.

        Returns:
            Self: A Card object created from the JSON string.
        """

        source_dict: CardDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Card"]
