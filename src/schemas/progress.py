"""Schemas for scores, unlocks, progress and referral statistics."""

from typing import Dict, List

from pydantic import Field

from config import MAX_DB_INT, MAX_QUIZ_QUESTIONS
from schemas.common import CamelModel


class QuizScore(CamelModel):
    chapter: int
    score: int
    date: str


class SubmitScoreRequest(CamelModel):
    """Result of one completed quiz, reported by the client."""

    chapter: int = Field(ge=-MAX_DB_INT, le=MAX_DB_INT)
    score: int = Field(
        ge=0, le=MAX_QUIZ_QUESTIONS, description="Number of correct answers."
    )
    total_questions: int = Field(
        ge=1, le=MAX_QUIZ_QUESTIONS, description="Number of questions in the quiz."
    )


class SubmitScoreResponse(CamelModel):
    message: str = "Score saved successfully"
    points_earned: int
    new_total_points: int


class ProgressResponse(CamelModel):
    quiz_scores: List[QuizScore]
    fika_points: int
    unlocked_modules: Dict[str, List[int]]


class UnlockResponse(CamelModel):
    message: str = "Module unlocked successfully"
    new_total_points: int
    unlocked_modules: Dict[str, List[int]]


class ReferralStatsResponse(CamelModel):
    referral_code: str
    referral_count: int
    referral_points: int
