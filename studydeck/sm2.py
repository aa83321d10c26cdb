import math
from datetime import datetime, timedelta, timezone
from numbers import Integral, Real
from typing import Iterable, List, Optional, TypeVar

from studydeck.errors import InvalidQualityInput
from studydeck.schemas import ReviewState

DEFAULT_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# Quality for a binary "got it / missed" signal, refined by how much the learner hesitated
CORRECT_QUALITY = {"none": 5, "some": 4, "much": 3}
INCORRECT_QUALITY = {"none": 2, "some": 1, "much": 0}

CardT = TypeVar("CardT")


def _as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps (e.g. read back from SQLite) as UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize_quality(quality) -> int:
    # bool is an int subclass; True would silently become a failing grade of 1
    if isinstance(quality, bool) or not isinstance(quality, Real):
        raise InvalidQualityInput(f"Quality must be a number between 0 and 5, got {quality!r}")
    if isinstance(quality, Integral):
        value = int(quality)
    else:
        if not math.isfinite(quality):
            raise InvalidQualityInput(f"Quality must be a finite number, got {quality!r}")
        value = _round_half_up(float(quality))
    return max(MIN_QUALITY, min(MAX_QUALITY, value))


class ReviewScheduler:
    """
    SM-2 spaced repetition scheduling for flashcards.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.

    Every method is a pure function of its arguments: the current time is
    always passed in, never read from the system clock.
    """

    @staticmethod
    def initialize_card() -> ReviewState:
        """Scheduling state for a freshly created card (due immediately)"""
        return ReviewState(
            repetitions=0,
            easiness_factor=DEFAULT_EASINESS_FACTOR,
            interval_days=0,
            next_review_date=None,
            last_reviewed_at=None,
        )

    @staticmethod
    def compute_next_review(
        quality,
        previous: Optional[ReviewState] = None,
        *,
        now: datetime,
    ) -> ReviewState:
        """
        Calculate the card's next scheduling state after one review.

        Args:
            quality: Response quality (0-5). 0=total blackout, 5=perfect.
                Out-of-range numbers are clamped; non-numbers raise.
            previous: State before this review (defaults for a new card)
            now: Time the review is recorded

        Returns:
            New ReviewState; ``previous`` is left untouched

        Raises:
            InvalidQualityInput: quality is not a finite number
        """
        quality = _normalize_quality(quality)
        if previous is None:
            previous = ReviewScheduler.initialize_card()

        # Update easiness factor based on quality
        new_ef = previous.easiness_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))

        # Ensure EF stays within bounds
        if new_ef < MIN_EASINESS_FACTOR:
            new_ef = MIN_EASINESS_FACTOR

        times_correct = previous.times_correct
        times_incorrect = previous.times_incorrect

        # If quality < 3, reset repetitions (failed recall)
        if quality < PASSING_QUALITY:
            new_repetitions = 0
            new_interval = 1
            times_incorrect += 1
        else:
            new_repetitions = previous.repetitions + 1
            times_correct += 1

            # Calculate new interval based on repetition count
            if new_repetitions == 1:
                new_interval = 1
            elif new_repetitions == 2:
                new_interval = 6
            else:
                new_interval = max(1, _round_half_up(previous.interval_days * new_ef))

        return ReviewState(
            repetitions=new_repetitions,
            easiness_factor=new_ef,
            interval_days=new_interval,
            next_review_date=now + timedelta(days=new_interval),
            last_reviewed_at=now,
            times_correct=times_correct,
            times_incorrect=times_incorrect,
        )

    @staticmethod
    def boolean_to_quality(correct: bool, hesitation: str = "none") -> int:
        """
        Convert a simple correct/incorrect outcome to an SM-2 quality.

        With no hesitation, correct maps to 5 and incorrect to 2.
        """
        if not isinstance(correct, bool):
            raise InvalidQualityInput(f"Expected a boolean outcome, got {correct!r}")
        table = CORRECT_QUALITY if correct else INCORRECT_QUALITY
        if hesitation not in table:
            raise InvalidQualityInput(f"Unknown hesitation level: {hesitation!r}")
        return table[hesitation]

    @staticmethod
    def is_due_for_review(next_review_date: Optional[datetime], now: datetime) -> bool:
        """Check if a card is due; never-scheduled cards always are"""
        if next_review_date is None:
            return True
        return _as_utc(next_review_date) <= _as_utc(now)

    @staticmethod
    def select_due_cards(cards: Iterable[CardT], now: datetime) -> List[CardT]:
        """
        Filter cards that are due at ``now`` and order them for a study session.

        Cards must expose a ``review_state`` attribute. Never-reviewed cards
        come first, then the most overdue; ties keep their input order.
        """
        due = [
            card for card in cards
            if ReviewScheduler.is_due_for_review(card.review_state.next_review_date, now)
        ]

        def sort_key(card):
            next_review = card.review_state.next_review_date
            if next_review is None:
                return (0,)
            return (1, _as_utc(next_review))

        return sorted(due, key=sort_key)

    @staticmethod
    def get_days_overdue(next_review_date: Optional[datetime], now: datetime) -> int:
        """Calculate how many whole days overdue a review is"""
        if next_review_date is None:
            return 0
        next_review_date = _as_utc(next_review_date)
        now = _as_utc(now)
        if now < next_review_date:
            return 0
        return (now - next_review_date).days

    @staticmethod
    def time_until_review(next_review_date: Optional[datetime], now: datetime) -> str:
        """Human-readable time until the next review"""
        if next_review_date is None:
            return "Ready to review"
        seconds = (_as_utc(next_review_date) - _as_utc(now)).total_seconds()
        if seconds <= 0:
            return "Ready to review"

        days = int(seconds // 86400)
        hours = int(seconds // 3600)
        minutes = int(seconds // 60)
        if days > 0:
            return f"In {days} day{'s' if days != 1 else ''}"
        if hours > 0:
            return f"In {hours} hour{'s' if hours != 1 else ''}"
        return f"In {minutes} minute{'s' if minutes != 1 else ''}"
