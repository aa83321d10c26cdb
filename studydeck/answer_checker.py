import re
from pydantic import BaseModel

# Words this short ("a", "of", "is") carry no meaning for overlap matching
MIN_WORD_LENGTH = 3
MATCH_THRESHOLD = 0.6

_PUNCTUATION = re.compile(r"[^\w\s]")


class AnswerCheckResult(BaseModel):
    is_correct: bool
    match_ratio: float


def _normalize(text: str) -> str:
    return _PUNCTUATION.sub("", text.lower().strip())


def local_answer_check(user_answer: str, correct_answer: str) -> AnswerCheckResult:
    """
    Fuzzy-grade a typed answer against the card's answer.

    Exact and substring matches pass outright; otherwise the share of the
    reference's meaningful words found in the answer must reach 60%.
    """
    normalized_user = _normalize(user_answer)
    normalized_correct = _normalize(correct_answer)

    if normalized_user == normalized_correct:
        return AnswerCheckResult(is_correct=True, match_ratio=1.0)

    if normalized_user and (normalized_user in normalized_correct or normalized_correct in normalized_user):
        return AnswerCheckResult(is_correct=True, match_ratio=0.9)

    user_words = [w for w in normalized_user.split() if len(w) >= MIN_WORD_LENGTH]
    correct_words = [w for w in normalized_correct.split() if len(w) >= MIN_WORD_LENGTH]

    if not correct_words:
        return AnswerCheckResult(is_correct=len(normalized_user) > 0, match_ratio=0.5)

    matched = [w for w in user_words if any(cw in w or w in cw for cw in correct_words)]
    ratio = min(1.0, len(matched) / len(correct_words))
    return AnswerCheckResult(is_correct=ratio >= MATCH_THRESHOLD, match_ratio=ratio)
