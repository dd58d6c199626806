"""
fsrs_card.review_log
--------------------

This module defines the ReviewLog class.

Classes:
    ReviewLog: Represents the log entry of a Card that has been reviewed.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
from typing_extensions import Self
from fsrs_card.rating import Rating
from fsrs_card.state import State


class ReviewLogDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewLog object.
    """

    rating: int
    elapsed_days: int
    scheduled_days: int
    state: int
    reviewed_date: str


@dataclass(frozen=True)
class ReviewLog:
    """
    Represents the log entry of a Card object that has been reviewed.

    Attributes:
        rating: The rating given to the card during the review.
        elapsed_days: Days between the previous review and this one.
        scheduled_days: The interval the card was scheduled with before this review.
        state: The state the card was reviewed from.
        reviewed_date: The date and time of the review.
    """

    rating: Rating
    elapsed_days: int
    scheduled_days: int
    state: State
    reviewed_date: datetime

    def to_dict(
        self,
    ) -> ReviewLogDict:
        """
        Returns a dictionary representation of the ReviewLog object.

        Returns:
            A dictionary representation of the ReviewLog object.
        """

        return {
            "rating": int(self.rating),
            "elapsed_days": self.elapsed_days,
            "scheduled_days": self.scheduled_days,
            "state": int(self.state),
            "reviewed_date": self.reviewed_date.isoformat(),
        }

    @classmethod
    def from_dict(
        cls,
        source_dict: ReviewLogDict,
    ) -> Self:
        """
        Creates a ReviewLog object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewLog object.

        Returns:
            A ReviewLog object created from the provided dictionary.
        """

        return cls(
            rating=Rating(int(source_dict["rating"])),
            elapsed_days=int(source_dict["elapsed_days"]),
            scheduled_days=int(source_dict["scheduled_days"]),
            state=State(int(source_dict["state"])),
            reviewed_date=datetime.fromisoformat(source_dict["reviewed_date"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ReviewLog object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ReviewLog object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ReviewLog object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ReviewLog object.

        Returns:
            Self: A ReviewLog object created from the JSON string.
        """

        source_dict: ReviewLogDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewLog"]
