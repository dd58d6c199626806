"""
fsrs-card
---------

Single-card FSRS scheduling: the card state machine, the memory model and the four candidate
outcomes of every review.
"""

from fsrs_card.state import State
from fsrs_card.rating import Rating
from fsrs_card.review_log import ReviewLog
from fsrs_card.parameters import Parameters
from fsrs_card.card import Card
from fsrs_card.scheduled_cards import ScheduledCards
from fsrs_card.scheduler import Scheduler

__all__ = [
    "Scheduler",
    "ScheduledCards",
    "Card",
    "Parameters",
    "Rating",
    "ReviewLog",
    "State",
]
