"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import progress_manager
from utils import question_manager
from utils import user_manager


def get_question_manager(db: Session = Depends(get_db)) -> question_manager.QuestionManager:
    """Get QuestionManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        QuestionManager instance.
    """
    return question_manager.QuestionManager(db)


def get_progress_manager(db: Session = Depends(get_db)) -> progress_manager.ProgressManager:
    """Get ProgressManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        ProgressManager instance.
    """
    return progress_manager.ProgressManager(db)


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


# Type aliases for dependency injection
QuestionManagerDep = Annotated[
    question_manager.QuestionManager, Depends(get_question_manager)
]
ProgressManagerDep = Annotated[
    progress_manager.ProgressManager, Depends(get_progress_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
