import logging
from datetime import datetime
from sqlalchemy.orm import Session
from studydeck.errors import CardNotFoundError, DeckNotFoundError
from studydeck.models import Deck, Flashcard
from studydeck.schemas import FlashcardCreate, FlashcardUpdate, ReviewState
from studydeck.sm2 import ReviewScheduler
from typing import List, Optional

logger = logging.getLogger(__name__)

def add_flashcard(db: Session, deck_id: int, card: FlashcardCreate) -> Flashcard:
    """Add a new (due immediately) card to a deck"""
    deck = db.query(Deck).filter(Deck.id == deck_id).first()
    if not deck:
        raise DeckNotFoundError(f"Deck {deck_id} not found")
    
    db_card = Flashcard(deck_id=deck_id, **card.model_dump())
    db_card.apply_review_state(ReviewScheduler.initialize_card())
    db.add(db_card)
    db.commit()
    db.refresh(db_card)
    return db_card

def get_flashcard(db: Session, flashcard_id: int) -> Optional[Flashcard]:
    """Get flashcard by ID"""
    return db.query(Flashcard).filter(Flashcard.id == flashcard_id).first()

def get_deck_flashcards(db: Session, deck_id: int) -> List[Flashcard]:
    """Get all cards of a deck in creation order"""
    return db.query(Flashcard).filter(
        Flashcard.deck_id == deck_id
    ).order_by(Flashcard.created_at, Flashcard.id).all()

def update_flashcard(db: Session, flashcard_id: int, updates: FlashcardUpdate) -> Flashcard:
    """Edit the question, answer or hint of a card"""
    db_card = get_flashcard(db, flashcard_id)
    if not db_card:
        raise CardNotFoundError(f"Flashcard {flashcard_id} not found")
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(db_card, key, value)
    db.commit()
    db.refresh(db_card)
    return db_card

def delete_flashcard(db: Session, flashcard_id: int) -> bool:
    """Delete a single card"""
    db_card = get_flashcard(db, flashcard_id)
    if not db_card:
        return False
    db.delete(db_card)
    db.commit()
    return True

def update_card_progress(db: Session, flashcard_id: int, state: ReviewState) -> Flashcard:
    """Persist the scheduler's output against a card (last write wins)"""
    db_card = get_flashcard(db, flashcard_id)
    if not db_card:
        raise CardNotFoundError(f"Flashcard {flashcard_id} not found")
    db_card.apply_review_state(state)
    db.commit()
    db.refresh(db_card)
    return db_card

def get_due_cards(db: Session, deck_id: int, now: datetime) -> List[Flashcard]:
    """Get the cards of a deck due at ``now``, never-reviewed first, then most overdue"""
    return ReviewScheduler.select_due_cards(get_deck_flashcards(db, deck_id), now)
