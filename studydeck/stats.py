"""Study session aggregates and daily streak."""

from datetime import date, timedelta
from typing import Iterable

from studydeck.schemas import StudyStats

MAX_STREAK_LOOKBACK_DAYS = 365
RECENT_SESSION_COUNT = 10


def _session_day(session) -> date:
    completed_at = session.completed_at
    return completed_at.date() if hasattr(completed_at, "date") else completed_at


def calculate_streak(session_days: Iterable[date], today: date) -> int:
    """
    Count consecutive study days ending today.

    A day without a session yet does not break the streak until it is over:
    if nothing was studied today the count starts from yesterday.
    """
    days = set(session_days)
    streak = 0
    check_date = today
    for i in range(MAX_STREAK_LOOKBACK_DAYS):
        if check_date in days:
            streak += 1
            check_date -= timedelta(days=1)
        elif i == 0:
            check_date -= timedelta(days=1)
        else:
            break
    return streak


def compute_study_stats(sessions, today: date) -> StudyStats:
    """Aggregate study sessions (newest first) into totals, accuracy and streak"""
    sessions = list(sessions)
    total_cards_studied = sum(s.cards_studied for s in sessions)
    total_correct = sum(s.correct_answers for s in sessions)
    total_questions = sum(s.total_questions for s in sessions)
    average_accuracy = (total_correct / total_questions) * 100 if total_questions > 0 else 0.0

    recent = [
        {
            "id": s.id,
            "deck_id": s.deck_id,
            "session_type": s.session_type,
            "cards_studied": s.cards_studied,
            "correct_answers": s.correct_answers,
            "total_questions": s.total_questions,
            "duration_seconds": s.duration_seconds,
            "completed_at": s.completed_at,
        }
        for s in sessions[:RECENT_SESSION_COUNT]
    ]

    return StudyStats(
        total_sessions=len(sessions),
        total_cards_studied=total_cards_studied,
        total_correct=total_correct,
        average_accuracy=average_accuracy,
        streak_days=calculate_streak((_session_day(s) for s in sessions), today),
        recent_sessions=recent,
    )
