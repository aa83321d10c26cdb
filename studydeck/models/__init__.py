from studydeck.models.deck import Deck
from studydeck.models.flashcard import Flashcard
from studydeck.models.study_session import StudySession

__all__ = [
    "Deck",
    "Flashcard",
    "StudySession",
]
