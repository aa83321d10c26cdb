from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from studydeck.database import Base

def _utcnow():
    return datetime.now(timezone.utc)

class Deck(Base):
    """Named collection of flashcards owned by one user"""
    __tablename__ = "flashcard_decks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    topic = Column(String)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
    
    flashcards = relationship(
        "Flashcard",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="Flashcard.id",
    )
    study_sessions = relationship("StudySession", back_populates="deck")
