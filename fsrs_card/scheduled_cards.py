"""
fsrs_card.scheduled_cards
-------------------------

This module defines the ScheduledCards class.

Classes:
    ScheduledCards: The four hypothetical next states of a card, one per rating.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from fsrs_card.card import Card
from fsrs_card.rating import Rating


@dataclass(init=False)
class ScheduledCards:
    """
    The possible outcomes of reviewing a card at a given time.

    Each candidate is an independent copy of the reviewed card whose state has been advanced
    for its rating. The reviewed card itself is left untouched.

    Attributes:
        cards: The candidate card for each rating.
        now: The date and time the candidates were generated for.
    """

    cards: dict[Rating, Card]
    now: datetime

    def __init__(self, card: Card, now: datetime) -> None:
        self.cards = {}
        for rating in Rating:
            next_card = card.copy()
            next_card.update_state(rating)
            self.cards[rating] = next_card

        self.now = now

    def select_card(self, rating: Rating) -> Card:
        """
        Returns a copy of the candidate card for the rating the user chose.

        Args:
            rating: The chosen rating for the card being reviewed.

        Returns:
            Card: The card as it would be after being reviewed with `rating`.
        """

        return self.cards[rating].copy()


__all__ = ["ScheduledCards"]
