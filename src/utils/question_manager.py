"""Question catalog management.

This module provides read access to the question catalog, grouped by chapter
and sliced into fixed-size modules, plus bulk import for seeding.
"""

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from config import MODULE_SIZE
from models.question import QuestionModel
from schemas.question import Question, QuestionCreate
from utils.converters import model_to_question, question_to_model

logger = logging.getLogger(__name__)


class QuestionManager:
    """Manages the question catalog using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize QuestionManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def list_chapters(self) -> List[int]:
        """List the distinct chapter numbers present in the catalog.

        Returns:
            Chapter numbers in ascending order.
        """
        rows = self.db.query(QuestionModel.chapter).distinct().all()
        return sorted(row[0] for row in rows)

    def list_questions(self, chapter: int) -> List[Question]:
        """Get the first module's worth of questions for a chapter.

        Args:
            chapter: Chapter number.

        Returns:
            Up to MODULE_SIZE questions in catalog order.
        """
        return self.list_module_questions(chapter, 1)

    def list_module_questions(self, chapter: int, module: int) -> List[Question]:
        """Get the questions of one module of a chapter.

        Module N is the slice starting at offset (N - 1) * MODULE_SIZE. A
        module past the end of the chapter yields an empty list.

        Args:
            chapter: Chapter number.
            module: 1-based module number.

        Returns:
            Up to MODULE_SIZE questions in catalog order.

        Raises:
            ValueError: If module is less than 1.
        """
        if module < 1:
            raise ValueError("Module number must be at least 1")
        models = (
            self.db.query(QuestionModel)
            .filter(QuestionModel.chapter == chapter)
            .order_by(QuestionModel.id)
            .offset((module - 1) * MODULE_SIZE)
            .limit(MODULE_SIZE)
            .all()
        )
        return [model_to_question(m) for m in models]

    def import_questions(
        self, questions: Iterable[QuestionCreate], replace: bool = False
    ) -> int:
        """Insert questions into the catalog in the given order.

        Args:
            questions: Validated questions to insert.
            replace: If True, delete the existing catalog first.

        Returns:
            Number of questions inserted.
        """
        if replace:
            deleted = self.db.query(QuestionModel).delete()
            logger.info("Removed %d existing questions", deleted)
        count = 0
        for question in questions:
            self.db.add(question_to_model(question))
            count += 1
        self.db.commit()
        logger.info("Imported %d questions", count)
        return count
