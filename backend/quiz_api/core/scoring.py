# backend/quiz_api/core/scoring.py

import logging
from typing import Any, Dict, List

from .schemas import SubmissionItem

logger = logging.getLogger("quiz.scoring")

# Positional letters a caller may submit instead of the option text.
OPTION_LETTERS = ["A", "B", "C", "D", "E", "F", "G"]


class EmptySubmissionError(ValueError):
    """Raised when a submission carries no items to score."""

    def __init__(self, message: str = "No items submitted"):
        super().__init__(message)


# ------------------------------------------------------------
# Per-type rules
# ------------------------------------------------------------
def is_mcq(qtype: str | None) -> bool:
    return "mcq" in (qtype or "").lower()


def score_mcq(user_answer: str | None, correct: str | None, options: Any = None) -> bool:
    """Match by option text (case-insensitive) or by option letter A-G."""
    ua = (user_answer or "").strip()
    expected = (correct or "").strip()
    if not ua or not expected:
        return False
    if ua.upper() == expected.upper():
        return True
    if isinstance(options, list):
        letter = ua.upper()
        if letter in OPTION_LETTERS:
            idx = OPTION_LETTERS.index(letter)
            if idx < len(options) and options[idx] is not None:
                return options[idx].strip() == expected
    return False


def accepted_answers(correct: str | None) -> List[str]:
    return [s.strip().lower() for s in (correct or "").split(",") if s.strip()]


def score_short_answer(user_answer: str | None, correct: str | None) -> bool:
    """Exact match against any comma-separated alternative, ignoring case."""
    ua = (user_answer or "").strip().lower()
    accept = accepted_answers(correct)
    if not ua or not accept:
        return False
    return ua in accept


# ------------------------------------------------------------
# Batch scoring
# ------------------------------------------------------------
def score_item(item: SubmissionItem) -> Dict[str, Any]:
    if is_mcq(item.type):
        is_correct = score_mcq(item.userAnswer, item.correct, item.options)
    else:
        is_correct = score_short_answer(item.userAnswer, item.correct)

    logger.debug(f"Scored qid={item.id} type={item.type!r} correct={is_correct}")
    return {
        "id": item.id,
        "correctAnswer": item.correct or "",
        "userAnswer": item.userAnswer or "",
        "isCorrect": is_correct,
    }


def score_submission(items: Any) -> Dict[str, Any]:
    """
    Score a batch of submitted answers.

    `items` is the raw `items` value of the request body. Anything other
    than a non-empty list raises EmptySubmissionError; items with fields of
    the wrong type raise pydantic's ValidationError.
    """
    if not isinstance(items, list) or not items:
        raise EmptySubmissionError()

    details = [score_item(SubmissionItem.model_validate(q)) for q in items]
    score = sum(1 for d in details if d["isCorrect"])

    logger.info(f"Scored submission: {score}/{len(items)} correct")
    return {"total": len(items), "score": score, "details": details}
