# backend/quiz_api/core/__init__.py
"""
Core package for the Notion Quiz API.
Only exposes schemas for request/response models.
"""

from .schemas import (
    SubmissionItem,
    QuizQuestion,
    QuestionsResponse,
    ScoreDetail,
    ScoreResponse,
)

__all__ = [
    "SubmissionItem",
    "QuizQuestion",
    "QuestionsResponse",
    "ScoreDetail",
    "ScoreResponse",
]
