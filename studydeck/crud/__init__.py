from studydeck.crud.deck import (
    create_deck,
    save_deck_with_flashcards,
    get_deck,
    list_decks,
    update_deck,
    delete_deck
)
from studydeck.crud.flashcard import (
    add_flashcard,
    get_flashcard,
    get_deck_flashcards,
    update_flashcard,
    delete_flashcard,
    update_card_progress,
    get_due_cards
)
from studydeck.crud.study_session import (
    record_study_session,
    get_study_sessions,
    get_study_stats
)

__all__ = [
    "create_deck",
    "save_deck_with_flashcards",
    "get_deck",
    "list_decks",
    "update_deck",
    "delete_deck",
    "add_flashcard",
    "get_flashcard",
    "get_deck_flashcards",
    "update_flashcard",
    "delete_flashcard",
    "update_card_progress",
    "get_due_cards",
    "record_study_session",
    "get_study_sessions",
    "get_study_stats",
]
