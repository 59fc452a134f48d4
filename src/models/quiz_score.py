from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class QuizScoreModel(Base):
    __tablename__ = "quiz_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    chapter = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    date = Column(String, nullable=False)  # ISO format string

    user = relationship("UserModel", back_populates="quiz_scores")
