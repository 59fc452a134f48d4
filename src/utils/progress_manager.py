"""Scoring and module unlock bookkeeping.

Points are earned one per correct answer and spent UNLOCK_COST at a time to
unlock modules. Module 1 of every chapter is always unlocked without a stored
record; see is_unlocked.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List

import pytz
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import UNLOCK_COST
from core.exceptions import (
    InsufficientPointsError,
    InvalidScoreError,
    ModuleAlreadyUnlockedError,
    UserNotFoundError,
)
from models.quiz_score import QuizScoreModel
from models.unlocked_module import UnlockedModuleModel
from models.user import UserModel
from schemas.progress import (
    ProgressResponse,
    QuizScore,
    SubmitScoreResponse,
    UnlockResponse,
)

logger = logging.getLogger(__name__)

UnlockMap = Dict[str, List[int]]


def is_unlocked(unlock_map: UnlockMap, chapter: int, module: int) -> bool:
    """Whether a module is available to a user.

    Args:
        unlock_map: Mapping of str(chapter) to unlocked module numbers.
        chapter: Chapter number.
        module: 1-based module number.

    Returns:
        True for module 1 of any chapter, or any stored module.
    """
    return module == 1 or module in unlock_map.get(str(chapter), [])


class ProgressManager:
    """Applies score and unlock transactions to user records."""

    def __init__(self, db: Session):
        """Initialize ProgressManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def _get_points(self, user_id: str) -> int:
        points = (
            self.db.query(UserModel.fika_points)
            .filter(UserModel.user_id == user_id)
            .scalar()
        )
        if points is None:
            raise UserNotFoundError(user_id)
        return points

    def get_unlock_map(self, user_id: str) -> UnlockMap:
        """Build the stored unlock map of a user.

        Chapters without stored unlocks are absent from the map.

        Args:
            user_id: ID of the user.

        Returns:
            Mapping of str(chapter) to sorted module numbers.
        """
        rows = (
            self.db.query(UnlockedModuleModel.chapter, UnlockedModuleModel.module)
            .filter(UnlockedModuleModel.user_id == user_id)
            .all()
        )
        unlock_map = defaultdict(list)
        for chapter, module in rows:
            unlock_map[str(chapter)].append(module)
        return {chapter: sorted(modules) for chapter, modules in unlock_map.items()}

    def submit_score(
        self, user_id: str, chapter: int, score: int, total_questions: int
    ) -> SubmitScoreResponse:
        """Record a completed quiz and award one point per correct answer.

        Resubmitting appends another record and awards the points again.

        Args:
            user_id: ID of the user.
            chapter: Chapter the quiz belongs to.
            score: Number of correct answers.
            total_questions: Number of questions in the quiz.

        Returns:
            SubmitScoreResponse with the points earned and the new balance.

        Raises:
            InvalidScoreError: If score is negative or exceeds total_questions.
            UserNotFoundError: If the user does not exist.
        """
        if score < 0 or score > total_questions:
            raise InvalidScoreError(
                f"Score {score} is outside 0..{total_questions}"
            )

        points_earned = score
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.user_id == user_id)
            .values(fika_points=UserModel.fika_points + points_earned)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            self.db.rollback()
            raise UserNotFoundError(user_id)

        self.db.add(
            QuizScoreModel(
                user_id=user_id,
                chapter=chapter,
                score=score,
                date=datetime.now(pytz.utc).isoformat(),
            )
        )
        self.db.commit()

        new_total = self._get_points(user_id)
        logger.info(
            "User %s scored %d/%d in chapter %d, balance now %d",
            user_id,
            score,
            total_questions,
            chapter,
            new_total,
        )
        return SubmitScoreResponse(
            points_earned=points_earned,
            new_total_points=new_total,
        )

    def unlock_module(self, user_id: str, chapter: int, module: int) -> UnlockResponse:
        """Spend UNLOCK_COST points to unlock a module of a chapter.

        The balance check and the decrement are one conditional UPDATE, so
        concurrent unlocks can never drive the balance below zero. A chapter
        with no stored unlocks is seeded with module 1 before the new module
        is added. Unlocking an already unlocked module still costs points.

        Args:
            user_id: ID of the user.
            chapter: Chapter number.
            module: 1-based module number.

        Returns:
            UnlockResponse with the new balance and the full unlock map.

        Raises:
            InsufficientPointsError: If the balance is below UNLOCK_COST.
            ModuleAlreadyUnlockedError: If a concurrent request stored the same unlock.
            UserNotFoundError: If the user does not exist.
        """
        result = self.db.execute(
            update(UserModel)
            .where(
                UserModel.user_id == user_id,
                UserModel.fika_points >= UNLOCK_COST,
            )
            .values(fika_points=UserModel.fika_points - UNLOCK_COST)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            self.db.rollback()
            # Distinguish a missing user from a short balance
            self._get_points(user_id)
            raise InsufficientPointsError(user_id, UNLOCK_COST)

        rows = (
            self.db.query(UnlockedModuleModel.module)
            .filter(
                UnlockedModuleModel.user_id == user_id,
                UnlockedModuleModel.chapter == chapter,
            )
            .all()
        )
        stored = {row[0] for row in rows}
        unlock_map = {str(chapter): sorted(stored)} if stored else {}
        wanted = {module}
        if not stored and is_unlocked(unlock_map, chapter, 1):
            # Module 1 was only implicitly unlocked; store it with the first unlock
            wanted.add(1)
        now = datetime.now(pytz.utc).isoformat()
        for number in sorted(wanted - stored):
            self.db.add(
                UnlockedModuleModel(
                    user_id=user_id,
                    chapter=chapter,
                    module=number,
                    unlocked_at=now,
                )
            )

        try:
            self.db.commit()
        except IntegrityError as e:
            # Refunds the decrement too
            self.db.rollback()
            raise ModuleAlreadyUnlockedError(chapter, module) from e

        new_total = self._get_points(user_id)
        logger.info(
            "User %s unlocked chapter %d module %d, balance now %d",
            user_id,
            chapter,
            module,
            new_total,
        )
        return UnlockResponse(
            new_total_points=new_total,
            unlocked_modules=self.get_unlock_map(user_id),
        )

    def get_progress(self, user_id: str) -> ProgressResponse:
        """Get the score history, balance and unlock map of a user.

        Args:
            user_id: ID of the user.

        Returns:
            ProgressResponse as stored, without derived values.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        points = self._get_points(user_id)
        scores = (
            self.db.query(QuizScoreModel)
            .filter(QuizScoreModel.user_id == user_id)
            .order_by(QuizScoreModel.id)
            .all()
        )
        return ProgressResponse(
            quiz_scores=[
                QuizScore(chapter=s.chapter, score=s.score, date=s.date)
                for s in scores
            ],
            fika_points=points,
            unlocked_modules=self.get_unlock_map(user_id),
        )
