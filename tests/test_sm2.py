import math
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from studydeck.errors import InvalidQualityInput
from studydeck.schemas import ReviewState
from studydeck.sm2 import ReviewScheduler, MIN_EASINESS_FACTOR


def card(name, next_review_date=None):
    return SimpleNamespace(name=name, review_state=ReviewState(next_review_date=next_review_date))


def test_new_card_defaults():
    state = ReviewScheduler.initialize_card()
    assert state.repetitions == 0
    assert state.easiness_factor == 2.5
    assert state.interval_days == 0
    assert state.next_review_date is None
    assert state.last_reviewed_at is None


def test_learning_curve_restarts_after_a_miss(now):
    s1 = ReviewScheduler.compute_next_review(5, None, now=now)
    assert (s1.repetitions, s1.interval_days) == (1, 1)
    assert s1.easiness_factor == pytest.approx(2.6)
    assert s1.next_review_date == now + timedelta(days=1)
    assert s1.last_reviewed_at == now

    day2 = now + timedelta(days=1)
    s2 = ReviewScheduler.compute_next_review(5, s1, now=day2)
    assert (s2.repetitions, s2.interval_days) == (2, 6)
    assert s2.easiness_factor == pytest.approx(2.7)
    assert s2.next_review_date == day2 + timedelta(days=6)

    s3 = ReviewScheduler.compute_next_review(2, s2, now=day2 + timedelta(days=6))
    assert (s3.repetitions, s3.interval_days) == (0, 1)
    assert s3.easiness_factor == pytest.approx(2.38)

    s4 = ReviewScheduler.compute_next_review(5, s3, now=day2 + timedelta(days=7))
    assert (s4.repetitions, s4.interval_days) == (1, 1)
    assert (s4.times_correct, s4.times_incorrect) == (3, 1)


def test_third_success_multiplies_by_new_easiness(now):
    previous = ReviewState(repetitions=2, easiness_factor=2.7, interval_days=6)
    state = ReviewScheduler.compute_next_review(5, previous, now=now)
    # 6 * 2.8 = 16.8
    assert state.interval_days == 17
    assert state.repetitions == 3


def test_interval_rounds_half_up(now):
    # quality 4 leaves EF unchanged, so the interval is 5 * 2.5 = 12.5
    previous = ReviewState(repetitions=3, easiness_factor=2.5, interval_days=5)
    state = ReviewScheduler.compute_next_review(4, previous, now=now)
    assert state.easiness_factor == pytest.approx(2.5)
    assert state.interval_days == 13


@pytest.mark.parametrize("quality", [0, 1, 2])
@pytest.mark.parametrize("previous", [
    ReviewState(),
    ReviewState(repetitions=1, easiness_factor=2.6, interval_days=1),
    ReviewState(repetitions=7, easiness_factor=2.9, interval_days=240),
])
def test_failure_resets_repetitions_and_interval(quality, previous, now):
    state = ReviewScheduler.compute_next_review(quality, previous, now=now)
    assert state.repetitions == 0
    assert state.interval_days == 1
    assert state.next_review_date == now + timedelta(days=1)
    assert state.times_incorrect == previous.times_incorrect + 1


def test_easiness_never_drops_below_floor(now):
    state = None
    for i in range(20):
        state = ReviewScheduler.compute_next_review(i % 3, state, now=now + timedelta(days=i))
        assert state.easiness_factor >= MIN_EASINESS_FACTOR
    assert state.easiness_factor == MIN_EASINESS_FACTOR


def test_success_streak_never_shrinks_interval(now):
    state = None
    intervals = []
    qualities = [3, 3, 3, 4, 3, 5, 3, 3, 4, 3]
    for i, quality in enumerate(qualities):
        state = ReviewScheduler.compute_next_review(quality, state, now=now + timedelta(days=i))
        intervals.append(state.interval_days)
    assert intervals == sorted(intervals)
    assert all(interval >= 1 for interval in intervals)


def test_same_inputs_give_identical_results(now):
    previous = ReviewState(repetitions=4, easiness_factor=2.2, interval_days=33, times_correct=4)
    first = ReviewScheduler.compute_next_review(3, previous, now=now)
    second = ReviewScheduler.compute_next_review(3, previous, now=now)
    assert first == second
    assert first.model_dump() == second.model_dump()


def test_previous_state_is_not_modified(now):
    previous = ReviewState(repetitions=2, easiness_factor=2.5, interval_days=6)
    ReviewScheduler.compute_next_review(0, previous, now=now)
    assert previous == ReviewState(repetitions=2, easiness_factor=2.5, interval_days=6)


@pytest.mark.parametrize("raw, expected", [(7, 5), (100, 5), (-3, 0), (4.5, 5), (2.5, 3), (2.4, 2)])
def test_out_of_range_quality_is_clamped(raw, expected, now):
    assert ReviewScheduler.compute_next_review(raw, None, now=now) == \
        ReviewScheduler.compute_next_review(expected, None, now=now)


@pytest.mark.parametrize("bad", ["5", None, math.nan, math.inf, -math.inf, True, False, [5]])
def test_non_numeric_quality_is_rejected(bad, now):
    with pytest.raises(InvalidQualityInput):
        ReviewScheduler.compute_next_review(bad, None, now=now)


def test_invalid_quality_is_a_value_error(now):
    with pytest.raises(ValueError):
        ReviewScheduler.compute_next_review(math.nan, None, now=now)


def test_boolean_mapping():
    assert ReviewScheduler.boolean_to_quality(True) == 5
    assert ReviewScheduler.boolean_to_quality(False) == 2


def test_boolean_mapping_matches_direct_quality(now):
    previous = ReviewState(repetitions=2, easiness_factor=2.5, interval_days=6)
    for outcome, quality in [(True, 5), (False, 2)]:
        mapped = ReviewScheduler.boolean_to_quality(outcome)
        assert ReviewScheduler.compute_next_review(mapped, previous, now=now) == \
            ReviewScheduler.compute_next_review(quality, previous, now=now)


@pytest.mark.parametrize("correct, hesitation, expected", [
    (True, "some", 4), (True, "much", 3), (False, "some", 1), (False, "much", 0),
])
def test_hesitation_refines_boolean_mapping(correct, hesitation, expected):
    assert ReviewScheduler.boolean_to_quality(correct, hesitation) == expected


def test_boolean_mapping_rejects_bad_input():
    with pytest.raises(InvalidQualityInput):
        ReviewScheduler.boolean_to_quality(True, "a lot")
    with pytest.raises(InvalidQualityInput):
        ReviewScheduler.boolean_to_quality(1)


def test_select_due_cards(now):
    cards = [
        card("tomorrow", now + timedelta(days=1)),
        card("exactly-now", now),
        card("new", None),
        card("yesterday", now - timedelta(days=1)),
    ]
    due = ReviewScheduler.select_due_cards(cards, now)
    assert [c.name for c in due] == ["new", "yesterday", "exactly-now"]
    # input untouched
    assert [c.name for c in cards] == ["tomorrow", "exactly-now", "new", "yesterday"]


def test_select_due_cards_keeps_input_order_for_ties(now):
    cards = [card("b"), card("a"), card("d", now), card("c", now)]
    assert [c.name for c in ReviewScheduler.select_due_cards(cards, now)] == ["b", "a", "d", "c"]


def test_select_due_cards_accepts_naive_timestamps(now):
    cards = [card("stored", datetime(2026, 3, 1, 12, 0)), card("later", datetime(2026, 3, 2, 10, 0))]
    assert [c.name for c in ReviewScheduler.select_due_cards(cards, now)] == ["stored"]


def test_days_overdue(now):
    assert ReviewScheduler.get_days_overdue(None, now) == 0
    assert ReviewScheduler.get_days_overdue(now + timedelta(hours=1), now) == 0
    assert ReviewScheduler.get_days_overdue(now - timedelta(hours=5), now) == 0
    assert ReviewScheduler.get_days_overdue(now - timedelta(days=3, hours=2), now) == 3


@pytest.mark.parametrize("delta, expected", [
    (None, "Ready to review"),
    (timedelta(0), "Ready to review"),
    (timedelta(days=-2), "Ready to review"),
    (timedelta(days=1, hours=3), "In 1 day"),
    (timedelta(days=6), "In 6 days"),
    (timedelta(hours=1), "In 1 hour"),
    (timedelta(hours=5, minutes=59), "In 5 hours"),
    (timedelta(minutes=45), "In 45 minutes"),
    (timedelta(minutes=1, seconds=10), "In 1 minute"),
    (timedelta(seconds=30), "In 0 minutes"),
])
def test_time_until_review(delta, expected, now):
    next_review = None if delta is None else now + delta
    assert ReviewScheduler.time_until_review(next_review, now) == expected


def test_is_due_for_review(now):
    assert ReviewScheduler.is_due_for_review(None, now)
    assert ReviewScheduler.is_due_for_review(now, now)
    assert not ReviewScheduler.is_due_for_review(now + timedelta(seconds=1), now)
    assert ReviewScheduler.is_due_for_review(datetime(2026, 3, 2, 9, 0), now)
