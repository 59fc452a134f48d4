"""Question database model."""

from sqlalchemy import Column, Integer, String, Text

from .base import Base


class QuestionModel(Base):
    """A multiple-choice question. ``id`` order is the catalog order."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chapter = Column(Integer, index=True, nullable=False)
    question = Column(Text, nullable=False)
    option_a = Column(String, nullable=False)
    option_b = Column(String, nullable=False)
    option_c = Column(String, nullable=False)
    option_d = Column(String, nullable=False)
    answer = Column(String, nullable=False)  # equals one of the option values
