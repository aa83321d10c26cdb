import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from studydeck.config import settings
from studydeck.errors import DeckLimitExceeded, DeckNotFoundError
from studydeck.models import Deck, Flashcard
from studydeck.schemas import DeckCreate, DeckUpdate, DeckResponse, FlashcardCreate
from typing import List, Optional

logger = logging.getLogger(__name__)

def _check_deck_limit(db: Session, user_id: str):
    count = db.query(func.count(Deck.id)).filter(Deck.user_id == user_id).scalar()
    if count >= settings.max_decks_per_user:
        logger.warning("Deck limit reached for user %s (%d decks)", user_id, count)
        raise DeckLimitExceeded(
            f"You can only create a maximum of {settings.max_decks_per_user} decks. "
            "Delete a deck to create a new one."
        )

def create_deck(db: Session, deck: DeckCreate) -> Deck:
    """Create an empty deck, enforcing the per-user deck limit"""
    _check_deck_limit(db, deck.user_id)
    db_deck = Deck(**deck.model_dump())
    db.add(db_deck)
    db.commit()
    db.refresh(db_deck)
    logger.info("Created deck %s for user %s", db_deck.id, deck.user_id)
    return db_deck

def save_deck_with_flashcards(db: Session, deck: DeckCreate, flashcards: List[FlashcardCreate]) -> Deck:
    """
    Create a deck together with its flashcards in one transaction.
    
    Nothing is persisted if any card fails to insert.
    """
    _check_deck_limit(db, deck.user_id)
    db_deck = Deck(**deck.model_dump())
    try:
        for card in flashcards:
            db_deck.flashcards.append(Flashcard(**card.model_dump()))
        db.add(db_deck)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_deck)
    logger.info("Saved deck %s with %d flashcards", db_deck.id, len(flashcards))
    return db_deck

def get_deck(db: Session, deck_id: int) -> Optional[Deck]:
    """Get deck by ID"""
    return db.query(Deck).filter(Deck.id == deck_id).first()

def list_decks(db: Session, user_id: str) -> List[DeckResponse]:
    """Get a user's decks with card counts, most recently updated first"""
    rows = (
        db.query(Deck, func.count(Flashcard.id))
        .outerjoin(Flashcard, Flashcard.deck_id == Deck.id)
        .filter(Deck.user_id == user_id)
        .group_by(Deck.id)
        .order_by(Deck.updated_at.desc(), Deck.id.desc())
        .all()
    )
    return [
        DeckResponse.model_validate(deck).model_copy(update={"flashcard_count": count})
        for deck, count in rows
    ]

def update_deck(db: Session, deck_id: int, updates: DeckUpdate) -> Deck:
    """Update deck title, topic or description"""
    db_deck = get_deck(db, deck_id)
    if not db_deck:
        raise DeckNotFoundError(f"Deck {deck_id} not found")
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(db_deck, key, value)
    db.commit()
    db.refresh(db_deck)
    return db_deck

def delete_deck(db: Session, deck_id: int) -> bool:
    """Delete a deck and all of its flashcards"""
    db_deck = get_deck(db, deck_id)
    if not db_deck:
        return False
    db.delete(db_deck)
    db.commit()
    logger.info("Deleted deck %s", deck_id)
    return True
