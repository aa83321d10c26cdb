from datetime import date
from sqlalchemy.orm import Session
from studydeck.models import StudySession
from studydeck.schemas import StudySessionCreate, StudyStats
from studydeck.stats import compute_study_stats
from typing import List

def record_study_session(db: Session, session: StudySessionCreate) -> StudySession:
    """Save a finished study session"""
    db_session = StudySession(**session.model_dump(exclude_none=True))
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session

def get_study_sessions(db: Session, user_id: str, limit: int = 50) -> List[StudySession]:
    """Get recent study sessions for a user, newest first"""
    return db.query(StudySession).filter(
        StudySession.user_id == user_id
    ).order_by(StudySession.completed_at.desc(), StudySession.id.desc()).limit(limit).all()

def get_study_stats(db: Session, user_id: str, today: date) -> StudyStats:
    """Aggregate the user's last 50 sessions into totals and a daily streak"""
    return compute_study_stats(get_study_sessions(db, user_id), today)
