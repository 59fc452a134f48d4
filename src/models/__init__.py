"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .login_session import LoginSessionModel
from .question import QuestionModel
from .quiz_score import QuizScoreModel
from .unlocked_module import UnlockedModuleModel
from .user import UserModel

__all__ = [
    "Base",
    "LoginSessionModel",
    "QuestionModel",
    "QuizScoreModel",
    "UnlockedModuleModel",
    "UserModel",
]
