from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from studydeck.database import Base

class StudySession(Base):
    """Record of one finished study session"""
    __tablename__ = "study_sessions"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    deck_id = Column(Integer, ForeignKey("flashcard_decks.id", ondelete="SET NULL"))
    
    session_type = Column(String, nullable=False)  # "flashcards", "quiz", "review", ...
    cards_studied = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    duration_seconds = Column(Integer)
    
    completed_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    
    deck = relationship("Deck", back_populates="study_sessions")
