from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class ReviewState(BaseModel):
    """SM-2 scheduling state carried by every flashcard"""
    repetitions: int = Field(0, ge=0)
    easiness_factor: float = 2.5
    interval_days: float = 0
    next_review_date: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
    times_correct: int = Field(0, ge=0)
    times_incorrect: int = Field(0, ge=0)

    class Config:
        frozen = True

class FlashcardCreate(BaseModel):
    """Schema for creating a flashcard"""
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    hint: Optional[str] = None

class FlashcardUpdate(BaseModel):
    """Schema for editing flashcard content"""
    question: Optional[str] = None
    answer: Optional[str] = None
    hint: Optional[str] = None

class DeckCreate(BaseModel):
    """Schema for creating a deck"""
    user_id: str
    title: str = Field(min_length=1)
    topic: Optional[str] = None
    description: Optional[str] = None

class DeckUpdate(BaseModel):
    """Schema for editing deck metadata"""
    title: Optional[str] = None
    topic: Optional[str] = None
    description: Optional[str] = None

class DeckResponse(BaseModel):
    """Schema for deck listing"""
    id: int
    user_id: str
    title: str
    topic: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    flashcard_count: int = 0

    class Config:
        from_attributes = True

class StudySessionCreate(BaseModel):
    """Schema for recording a finished study session"""
    user_id: str
    session_type: str
    cards_studied: int = Field(0, ge=0)
    correct_answers: int = Field(0, ge=0)
    total_questions: int = Field(0, ge=0)
    duration_seconds: Optional[int] = Field(None, ge=0)
    deck_id: Optional[int] = None
    completed_at: Optional[datetime] = None

class StudyStats(BaseModel):
    """Aggregated study statistics for a user"""
    total_sessions: int
    total_cards_studied: int
    total_correct: int
    average_accuracy: float
    streak_days: int
    recent_sessions: List[dict] = Field(default_factory=list)
