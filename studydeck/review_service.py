import logging
from typing import Iterable, List, Optional, Union

from studydeck.clock import SystemClock
from studydeck.repository import ReviewStateRepository
from studydeck.schemas import ReviewState
from studydeck.sm2 import ReviewScheduler

logger = logging.getLogger(__name__)


class ReviewService:
    """Records review events: load state, run the scheduler, store the result"""

    def __init__(self, repository: ReviewStateRepository, clock=None):
        self.repository = repository
        self.clock = clock or SystemClock()

    def record_review(
        self,
        card_id,
        outcome: Union[int, float, bool],
        hesitation: str = "none",
    ) -> ReviewState:
        """
        Apply one learner response to a card.

        Args:
            card_id: Card whose state is updated
            outcome: Quality 0-5, or True/False for "got it" / "missed"
            hesitation: Only used for boolean outcomes ("none", "some", "much")

        Returns:
            The card's new ReviewState, already persisted
        """
        if isinstance(outcome, bool):
            quality = ReviewScheduler.boolean_to_quality(outcome, hesitation)
        else:
            quality = outcome

        previous: Optional[ReviewState] = self.repository.get(card_id)
        state = ReviewScheduler.compute_next_review(quality, previous, now=self.clock.now())
        self.repository.put(card_id, state)

        logger.info(
            "Card %s reviewed: quality=%s repetitions=%d interval=%s next=%s",
            card_id, quality, state.repetitions, state.interval_days,
            state.next_review_date.isoformat(),
        )
        return state

    def due_cards(self, cards: Iterable) -> List:
        """Cards due right now, in study order"""
        return ReviewScheduler.select_due_cards(cards, self.clock.now())
