from pydantic import BaseModel
from typing import Any, List, Optional

# ------------------------------------------------------------
# Request models
# ------------------------------------------------------------
class SubmissionItem(BaseModel):
    id: Any = None
    type: Optional[str] = None         # "MCQ", "Short answer", ...
    userAnswer: Optional[str] = None   # option text or letter for MCQ
    correct: Optional[str] = None      # comma-separated alternatives for short answer
    options: Any = None                # only used when it is a list


# ------------------------------------------------------------
# Question & Response models
# ------------------------------------------------------------
class QuizQuestion(BaseModel):
    id: str
    type: str
    question: str
    options: List[str]
    correct: str
    lectureIds: List[str]


class QuestionsResponse(BaseModel):
    count: int
    items: List[QuizQuestion]
    truncated: bool = False


class ScoreDetail(BaseModel):
    id: Any = None
    correctAnswer: str
    userAnswer: str
    isCorrect: bool


class ScoreResponse(BaseModel):
    total: int
    score: int
    details: List[ScoreDetail]
