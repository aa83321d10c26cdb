"""
Storage of per-card scheduling state.

The review service only needs ``get`` and ``put``; which store backs them is
decided by whoever builds the service.
"""

from typing import Dict, Optional, Protocol

from sqlalchemy.orm import Session

from studydeck.crud.flashcard import get_flashcard, update_card_progress
from studydeck.schemas import ReviewState


class ReviewStateRepository(Protocol):
    def get(self, card_id) -> Optional[ReviewState]:
        ...

    def put(self, card_id, state: ReviewState) -> None:
        ...


class InMemoryReviewStateRepository:
    """Dict-backed repository, one instance per caller"""

    def __init__(self, states: Optional[Dict] = None):
        self._states = dict(states or {})

    def get(self, card_id) -> Optional[ReviewState]:
        return self._states.get(card_id)

    def put(self, card_id, state: ReviewState) -> None:
        self._states[card_id] = state

    def __contains__(self, card_id) -> bool:
        return card_id in self._states


class SqlReviewStateRepository:
    """Reads and writes the review columns of the ``flashcards`` table"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, card_id) -> Optional[ReviewState]:
        card = get_flashcard(self.db, card_id)
        return card.review_state if card else None

    def put(self, card_id, state: ReviewState) -> None:
        update_card_progress(self.db, card_id, state)
