from fsrs_card.scheduler import Scheduler
from fsrs_card.parameters import Parameters, DEFAULT_W
from fsrs_card.card import Card
from fsrs_card.state import State
from fsrs_card.rating import Rating

from datetime import datetime, timedelta, timezone
import json
import pytest
import random

NOW = datetime(2022, 11, 29, 12, 30, 0, 0, timezone.utc)


def review_card_at(days_ago: int, stability: float = 10.0) -> Card:
    return Card(
        due=NOW,
        stability=stability,
        difficulty=5.0,
        scheduled_days=days_ago,
        reps=4,
        state=State.Review,
        last_review=NOW - timedelta(days=days_ago),
        previous_state=State.Review,
    )


class TestParameters:
    def test_defaults(self):
        parameters = Parameters()

        assert parameters.request_retention == 0.9
        assert parameters.maximum_interval == 36500
        assert parameters.w == DEFAULT_W
        assert len(parameters.w) == 17
        assert parameters.enable_fuzz is False

    def test_invalid_weights(self):
        with pytest.raises(ValueError, match="Expected 17 weights, got 16"):
            Parameters(w=DEFAULT_W[:16])

        # weights themselves are not range checked
        Parameters(w=[100.0] * 17)

    @pytest.mark.parametrize("request_retention", [0, -0.5, 1.01])
    def test_invalid_request_retention(self, request_retention):
        with pytest.raises(ValueError, match="request_retention"):
            Parameters(request_retention=request_retention)

    def test_all_errors_reported(self):
        with pytest.raises(ValueError) as excinfo:
            Parameters(request_retention=2, maximum_interval=0, w=[1.0])

        message = str(excinfo.value)
        assert "weights" in message
        assert "request_retention" in message
        assert "maximum_interval" in message

    def test_memory_model(self):
        parameters = Parameters()

        assert parameters.init_stability(Rating.Good) == 2.4
        assert parameters.init_difficulty(Rating.Good) == pytest.approx(4.93)
        assert parameters.init_difficulty(Rating.Easy) == pytest.approx(3.99)
        assert parameters.forgetting_curve(0, 5.0) == 1.0
        assert parameters.forgetting_curve(10, 10.0) == pytest.approx(0.9)
        # at the default retention the interval equals the stability
        assert parameters.next_interval(5.8) == 6
        assert parameters.next_interval(0.2) == 1

        # difficulty stays within [1, 10]
        difficulty = 5.0
        for _ in range(50):
            difficulty = parameters.next_difficulty(difficulty, Rating.Again)
        assert difficulty <= 10
        for _ in range(50):
            difficulty = parameters.next_difficulty(difficulty, Rating.Easy)
        assert difficulty >= 1

    def test_clamping(self):
        parameters = Parameters()

        assert parameters.clamp_stability(0.0) == 0.1
        assert parameters.clamp_stability(3.5) == 3.5
        assert parameters.clamp_difficulty(0.0) == 1.0
        assert parameters.clamp_difficulty(12.0) == 10.0
        assert parameters.clamp_difficulty(6.5) == 6.5

    def test_recall_and_forget_stability(self):
        parameters = Parameters()
        retrievability = parameters.forgetting_curve(10, 10.0)

        hard = parameters.next_recall_stability(5.0, 10.0, retrievability, Rating.Hard)
        good = parameters.next_recall_stability(5.0, 10.0, retrievability, Rating.Good)
        easy = parameters.next_recall_stability(5.0, 10.0, retrievability, Rating.Easy)
        forget = parameters.next_forget_stability(5.0, 10.0, retrievability)

        assert forget < 10.0 < hard < good < easy

    def test_Parameters_serialize(self):
        parameters = Parameters(
            request_retention=0.85, maximum_interval=3650, enable_fuzz=True
        )

        assert type(json.dumps(parameters.to_dict())) is str

        copied_parameters = Parameters.from_json(parameters.to_json())
        assert copied_parameters == parameters
        assert copied_parameters.to_dict() == parameters.to_dict()


class TestScheduler:
    def test_schedule_new_card(self):
        scheduler = Scheduler()
        card = Card(due=NOW, last_review=NOW - timedelta(days=3))

        scheduled_cards = scheduler.schedule(card, NOW)

        again = scheduled_cards.select_card(Rating.Again)
        hard = scheduled_cards.select_card(Rating.Hard)
        good = scheduled_cards.select_card(Rating.Good)
        easy = scheduled_cards.select_card(Rating.Easy)

        assert again.state == hard.state == good.state == State.Learning
        assert easy.state == State.Review
        assert again.lapses == 1
        assert good.lapses == 0

        assert again.due == NOW + timedelta(minutes=1)
        assert hard.due == NOW + timedelta(minutes=5)
        assert good.due == NOW + timedelta(minutes=10)
        assert easy.scheduled_days == 6
        assert easy.due == NOW + timedelta(days=6)

        assert good.stability == 2.4
        assert good.difficulty == pytest.approx(4.93)

        for rating, candidate in scheduled_cards.cards.items():
            assert candidate.reps == 1
            assert candidate.elapsed_days == 0
            assert candidate.last_review == NOW
            assert candidate.previous_state == State.New
            assert candidate.log.rating == rating
            assert candidate.log.state == State.New
            assert candidate.log.reviewed_date == NOW

    def test_schedule_does_not_mutate_card(self):
        scheduler = Scheduler()
        card = review_card_at(days_ago=10)
        before = card.to_dict()

        scheduler.schedule(card, NOW)

        assert card.to_dict() == before

    def test_schedule_learning_card(self):
        scheduler = Scheduler()
        card = Card(
            due=NOW,
            stability=2.4,
            difficulty=4.93,
            reps=1,
            state=State.Learning,
            last_review=NOW - timedelta(minutes=10),
        )

        scheduled_cards = scheduler.schedule(card, NOW)

        again = scheduled_cards.select_card(Rating.Again)
        hard = scheduled_cards.select_card(Rating.Hard)
        good = scheduled_cards.select_card(Rating.Good)
        easy = scheduled_cards.select_card(Rating.Easy)

        assert again.state == hard.state == State.Learning
        assert good.state == easy.state == State.Review
        assert again.due == NOW + timedelta(minutes=5)
        assert hard.due == NOW + timedelta(minutes=10)
        assert again.scheduled_days == hard.scheduled_days == 0
        assert good.scheduled_days >= 1
        assert easy.scheduled_days > good.scheduled_days
        assert again.lapses == 0

    def test_schedule_review_card(self):
        scheduler = Scheduler()
        card = review_card_at(days_ago=10)

        scheduled_cards = scheduler.schedule(card, NOW)

        again = scheduled_cards.select_card(Rating.Again)
        hard = scheduled_cards.select_card(Rating.Hard)
        good = scheduled_cards.select_card(Rating.Good)
        easy = scheduled_cards.select_card(Rating.Easy)

        assert again.state == State.Relearning
        assert again.lapses == 1
        assert again.due == NOW + timedelta(minutes=5)
        assert again.scheduled_days == 0
        assert again.stability < card.stability

        for candidate in (hard, good, easy):
            assert candidate.state == State.Review
            assert candidate.lapses == 0
            assert candidate.elapsed_days == 10

        assert again.due < hard.due <= good.due < easy.due
        assert hard.scheduled_days <= good.scheduled_days < easy.scheduled_days

        # logs record the schedule the card had before this review
        assert again.log.state == State.Review
        assert again.log.scheduled_days == 10
        assert again.log.elapsed_days == 10

    def test_maximum_interval(self):
        scheduler = Scheduler(Parameters(maximum_interval=5))
        card = review_card_at(days_ago=100, stability=100.0)

        scheduled_cards = scheduler.schedule(card, NOW)

        for candidate in scheduled_cards.cards.values():
            assert candidate.scheduled_days <= 5
            assert candidate.due <= NOW + timedelta(days=5)

    def test_review_card(self):
        scheduler = Scheduler()

        card = Card(due=NOW, last_review=NOW)
        review_datetime = NOW

        ivl_history = []
        for rating in (Rating.Good,) * 6:
            card, review_log = scheduler.review_card(card, rating, review_datetime)

            assert review_log == card.log
            assert review_log.rating == rating

            ivl = (card.due - card.last_review).days
            ivl_history.append(ivl)

            review_datetime = card.due

        assert ivl_history[0] == 0  # still learning
        assert card.state == State.Review
        assert card.reps == 6
        # successful reviews keep spacing the card out
        assert ivl_history[2:] == sorted(set(ivl_history[2:]))

    def test_relearning_card_stays_relearning(self):
        scheduler = Scheduler()
        card = Card(
            due=NOW,
            stability=2.0,
            difficulty=6.0,
            reps=5,
            lapses=1,
            state=State.Relearning,
            last_review=NOW - timedelta(minutes=5),
        )

        scheduled_cards = scheduler.schedule(card, NOW)

        again = scheduled_cards.select_card(Rating.Again)
        hard = scheduled_cards.select_card(Rating.Hard)

        assert again.state == hard.state == State.Relearning
        assert again.due == NOW + timedelta(minutes=5)
        assert hard.due == NOW + timedelta(minutes=10)
        assert again.scheduled_days == hard.scheduled_days == 0
        assert again.lapses == hard.lapses == 1
        assert again.log.state == hard.log.state == State.Relearning

    @pytest.mark.parametrize(
        "state,stability,difficulty",
        [
            (State.Review, 0.0, 5.0),
            (State.Review, 5.0, 0.0),
            (State.Review, 0.0, 0.0),
            (State.Learning, 0.0, 0.0),
            (State.Relearning, 0.0, 4.0),
        ],
    )
    def test_reviewed_state_without_memory_values(self, state, stability, difficulty):
        scheduler = Scheduler()
        card = Card(
            due=NOW,
            stability=stability,
            difficulty=difficulty,
            state=state,
            last_review=NOW - timedelta(days=3),
        )

        scheduled_cards = scheduler.schedule(card, NOW)

        for candidate in scheduled_cards.cards.values():
            assert candidate.stability > 0
            assert 1 <= candidate.difficulty <= 10
            assert candidate.due > NOW

        good = scheduled_cards.cards[Rating.Good]
        easy = scheduled_cards.cards[Rating.Easy]
        assert 1 <= good.scheduled_days < easy.scheduled_days

    def test_relapse(self):
        scheduler = Scheduler()
        card = review_card_at(days_ago=10)

        card, review_log = scheduler.review_card(card, Rating.Again, NOW)

        assert card.state == State.Relearning
        assert card.lapses == 1
        assert review_log.state == State.Review

        card, review_log = scheduler.review_card(
            card, Rating.Good, NOW + timedelta(minutes=5)
        )

        assert card.state == State.Review
        assert card.lapses == 1
        assert review_log.state == State.Relearning
        assert card.scheduled_days >= 1

    def test_datetime(self):
        scheduler = Scheduler()
        card = Card()

        # reviewing a card with a non-utc, non-timezone-aware datetime object should raise a Value Error
        with pytest.raises(ValueError):
            scheduler.schedule(card, datetime(2022, 11, 29, 12, 30, 0, 0))

        with pytest.raises(ValueError):
            scheduler.review_card(
                card,
                Rating.Good,
                datetime(2022, 11, 29, 12, 30, 0, 0, timezone(timedelta(hours=2))),
            )

        card, _ = scheduler.review_card(card, Rating.Good)

        assert card.due.tzinfo == timezone.utc
        assert card.last_review.tzinfo == timezone.utc
        assert card.due >= card.last_review

    def test_fuzzed_interval(self):
        scheduler = Scheduler(Parameters(enable_fuzz=True, maximum_interval=365))
        card = review_card_at(days_ago=30, stability=30.0)

        random.seed(42)
        first = scheduler.schedule(card, NOW)
        random.seed(42)
        second = scheduler.schedule(card, NOW)

        for rating in Rating:
            assert first.cards[rating].due == second.cards[rating].due

        hard = first.cards[Rating.Hard].scheduled_days
        good = first.cards[Rating.Good].scheduled_days
        easy = first.cards[Rating.Easy].scheduled_days
        assert 2 <= hard <= good < easy <= 365

    def test_short_intervals_are_not_fuzzed(self):
        scheduler = Scheduler(Parameters(enable_fuzz=True))

        assert scheduler._get_fuzzed_interval(1) == 1
        assert scheduler._get_fuzzed_interval(2) == 2

        for _ in range(100):
            assert 2 <= scheduler._get_fuzzed_interval(10) <= 12
