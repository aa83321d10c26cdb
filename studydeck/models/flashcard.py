from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from studydeck.database import Base
from studydeck.schemas import ReviewState

class Flashcard(Base):
    """Question/answer card with its SM-2 scheduling state"""
    __tablename__ = "flashcards"
    
    id = Column(Integer, primary_key=True, index=True)
    deck_id = Column(Integer, ForeignKey("flashcard_decks.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    hint = Column(Text)
    
    # SM-2 algorithm fields
    repetitions = Column(Integer, nullable=False, default=0)  # consecutive successful reviews
    easiness_factor = Column(Float, nullable=False, default=2.5)  # EF: difficulty rating
    interval_days = Column(Float, nullable=False, default=0)  # days until next review
    
    # Informational counters, not used by the scheduling math
    times_correct = Column(Integer, nullable=False, default=0)
    times_incorrect = Column(Integer, nullable=False, default=0)
    
    last_reviewed_at = Column(DateTime(timezone=True))
    next_review_at = Column(DateTime(timezone=True), index=True)  # NULL = due now
    
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    
    deck = relationship("Deck", back_populates="flashcards")
    
    @property
    def review_state(self) -> ReviewState:
        return ReviewState(
            repetitions=self.repetitions or 0,
            easiness_factor=self.easiness_factor if self.easiness_factor is not None else 2.5,
            interval_days=self.interval_days or 0,
            next_review_date=self.next_review_at,
            last_reviewed_at=self.last_reviewed_at,
            times_correct=self.times_correct or 0,
            times_incorrect=self.times_incorrect or 0,
        )
    
    def apply_review_state(self, state: ReviewState):
        """Copy a scheduler result onto the persisted columns"""
        self.repetitions = state.repetitions
        self.easiness_factor = state.easiness_factor
        self.interval_days = state.interval_days
        self.next_review_at = state.next_review_date
        self.last_reviewed_at = state.last_reviewed_at
        self.times_correct = state.times_correct
        self.times_incorrect = state.times_incorrect
