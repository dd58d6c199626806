"""
fsrs_card.scheduler
-------------------

This module defines the Scheduler class, which turns the candidate cards of a review into fully
scheduled cards with updated memory state, due dates and review logs.

Classes:
    Scheduler: The FSRS spaced-repetition scheduler.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from random import random
import logging
import math
from fsrs_card.card import Card
from fsrs_card.parameters import Parameters
from fsrs_card.rating import Rating
from fsrs_card.review_log import ReviewLog
from fsrs_card.scheduled_cards import ScheduledCards
from fsrs_card.state import State

logger = logging.getLogger(__name__)

FUZZ_RANGES = [
    {
        "start": 2.5,
        "end": 7.0,
        "factor": 0.15,
    },
    {
        "start": 7.0,
        "end": 20.0,
        "factor": 0.1,
    },
    {
        "start": 20.0,
        "end": math.inf,
        "factor": 0.05,
    },
]

# short steps used while a card is outside the Review state
NEW_STEPS = {
    Rating.Again: timedelta(minutes=1),
    Rating.Hard: timedelta(minutes=5),
    Rating.Good: timedelta(minutes=10),
}
LEARNING_STEPS = {
    Rating.Again: timedelta(minutes=5),
    Rating.Hard: timedelta(minutes=10),
}
RELAPSE_STEP = timedelta(minutes=5)


@dataclass(init=False)
class Scheduler:
    """
    The FSRS scheduler.

    Enables the reviewing and future scheduling of cards according to the FSRS algorithm.

    Attributes:
        parameters: The model weights and scheduling policy used by the scheduler.
    """

    parameters: Parameters

    def __init__(self, parameters: Parameters | None = None) -> None:
        if parameters is None:
            parameters = Parameters()
        self.parameters = parameters

    def schedule(self, card: Card, now: datetime | None = None) -> ScheduledCards:
        """
        Computes the outcome of reviewing a card at a given time for every possible rating.

        The given card is not modified.

        Args:
            card: The card being reviewed.
            now: The date and time of the review. Defaults to the current time.

        Returns:
            ScheduledCards: The fully scheduled candidate card for each rating, with its review log attached.

        Raises:
            ValueError: If the `now` argument is not timezone-aware and set to UTC.
        """

        now = _validate_datetime(now)

        card = card.copy()
        card.previous_state = card.state
        if card.state == State.New:
            card.elapsed_days = 0
        else:
            card.elapsed_days = max(0, (now - card.last_review).days)
        card.last_review = now
        card.reps += 1

        logger.debug(
            "Scheduling card reviewed from %s after %d elapsed days",
            card.state.name,
            card.elapsed_days,
        )

        scheduled_cards = ScheduledCards(card, now)
        for rating, next_card in scheduled_cards.cards.items():
            next_card.save_log(rating)

        match card.state:
            case State.New:
                self._schedule_new(scheduled_cards)
            case State.Learning | State.Relearning:
                self._schedule_learning(card, scheduled_cards)
            case State.Review:
                self._schedule_review(card, scheduled_cards)

        return scheduled_cards

    def review_card(
        self, card: Card, rating: Rating, now: datetime | None = None
    ) -> tuple[Card, ReviewLog]:
        """
        Reviews a card with a given rating at a given time.

        Args:
            card: The card being reviewed.
            rating: The chosen rating for the card being reviewed.
            now: The date and time of the review. Defaults to the current time.

        Returns:
            tuple[Card,ReviewLog]: A tuple containing the updated, reviewed card and its corresponding review log.

        Raises:
            ValueError: If the `now` argument is not timezone-aware and set to UTC.
        """

        reviewed_card = self.schedule(card, now).select_card(rating)
        assert reviewed_card.log is not None

        return reviewed_card, reviewed_card.log

    def _schedule_new(self, scheduled_cards: ScheduledCards) -> None:
        now = scheduled_cards.now

        for rating, next_card in scheduled_cards.cards.items():
            next_card.difficulty = self.parameters.init_difficulty(rating)
            next_card.stability = self.parameters.init_stability(rating)

        for rating, step in NEW_STEPS.items():
            next_card = scheduled_cards.cards[rating]
            next_card.scheduled_days = 0
            next_card.due = now + step

        easy_card = scheduled_cards.cards[Rating.Easy]
        easy_interval = self._next_interval(easy_card.stability)
        self._set_interval(easy_card, easy_interval, now)

    def _schedule_learning(self, card: Card, scheduled_cards: ScheduledCards) -> None:
        now = scheduled_cards.now

        self._next_memory_state(card, scheduled_cards)

        for rating, step in LEARNING_STEPS.items():
            next_card = scheduled_cards.cards[rating]
            next_card.scheduled_days = 0
            next_card.due = now + step

        good_card = scheduled_cards.cards[Rating.Good]
        easy_card = scheduled_cards.cards[Rating.Easy]

        good_interval = self._next_interval(good_card.stability)
        easy_interval = max(self._next_interval(easy_card.stability), good_interval + 1)

        self._set_interval(good_card, good_interval, now)
        self._set_interval(easy_card, easy_interval, now)

    def _schedule_review(self, card: Card, scheduled_cards: ScheduledCards) -> None:
        now = scheduled_cards.now

        self._next_memory_state(card, scheduled_cards)

        again_card = scheduled_cards.cards[Rating.Again]
        hard_card = scheduled_cards.cards[Rating.Hard]
        good_card = scheduled_cards.cards[Rating.Good]
        easy_card = scheduled_cards.cards[Rating.Easy]

        hard_interval = self._next_interval(hard_card.stability)
        good_interval = self._next_interval(good_card.stability)
        hard_interval = min(hard_interval, good_interval)
        good_interval = max(good_interval, hard_interval + 1)
        easy_interval = max(self._next_interval(easy_card.stability), good_interval + 1)

        again_card.scheduled_days = 0
        again_card.due = now + RELAPSE_STEP

        self._set_interval(hard_card, hard_interval, now)
        self._set_interval(good_card, good_interval, now)
        self._set_interval(easy_card, easy_interval, now)

    def _next_memory_state(self, card: Card, scheduled_cards: ScheduledCards) -> None:
        # the reviewed card carries the stability and difficulty from before this review;
        # a card placed in a reviewed state without them is treated as minimally stable
        difficulty = self.parameters.clamp_difficulty(card.difficulty)
        stability = self.parameters.clamp_stability(card.stability)
        retrievability = self.parameters.forgetting_curve(card.elapsed_days, stability)

        for rating, next_card in scheduled_cards.cards.items():
            next_card.difficulty = self.parameters.next_difficulty(difficulty, rating)

            if rating == Rating.Again:
                next_card.stability = self.parameters.next_forget_stability(
                    difficulty, stability, retrievability
                )
            else:
                next_card.stability = self.parameters.next_recall_stability(
                    difficulty, stability, retrievability, rating
                )

    def _next_interval(self, stability: float) -> int:
        interval = self.parameters.next_interval(stability)

        if self.parameters.enable_fuzz:
            interval = self._get_fuzzed_interval(interval)

        logger.debug("Next interval for stability %.4f: %d days", stability, interval)

        return interval

    def _set_interval(self, card: Card, interval_days: int, now: datetime) -> None:
        # ordering adjustments (good + 1, easy + 1) must not push past the cap
        interval_days = min(interval_days, self.parameters.maximum_interval)

        card.scheduled_days = interval_days
        card.due = now + timedelta(days=interval_days)

    def _get_fuzzed_interval(self, interval_days: int) -> int:
        """
        Takes the current calculated interval and adds a small amount of random fuzz to it.
        For example, a card that would've been due in 50 days, after fuzzing, might be due in 49, or 51 days.

        Args:
            interval_days: The calculated next interval in days, before fuzzing.

        Returns:
            int: The new interval in days, after fuzzing.
        """

        if interval_days < 2.5:  # fuzz is not applied to intervals less than 2.5
            return interval_days

        maximum_interval = self.parameters.maximum_interval

        delta = 1.0
        for fuzz_range in FUZZ_RANGES:
            delta += fuzz_range["factor"] * max(
                min(interval_days, fuzz_range["end"]) - fuzz_range["start"], 0.0
            )

        min_ivl = int(round(interval_days - delta))
        max_ivl = int(round(interval_days + delta))

        # make sure the min_ivl and max_ivl fall into a valid range
        min_ivl = max(2, min_ivl)
        max_ivl = min(max_ivl, maximum_interval)
        min_ivl = min(min_ivl, max_ivl)

        fuzzed_interval_days = (
            random() * (max_ivl - min_ivl + 1)
        ) + min_ivl  # the next interval is a random value between min_ivl and max_ivl

        return min(int(fuzzed_interval_days), max_ivl)


def _validate_datetime(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)

    if now.tzinfo is None or now.tzinfo != timezone.utc:
        raise ValueError("datetime must be timezone-aware and set to UTC")

    return now


__all__ = ["Scheduler"]
