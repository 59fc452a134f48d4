"""Question schema definitions."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config import MAX_DB_INT


class QuestionCreate(BaseModel):
    """A question as supplied to the catalog importer."""

    model_config = ConfigDict(str_strip_whitespace=True)

    chapter: int = Field(ge=-MAX_DB_INT, le=MAX_DB_INT)
    question: str = Field(min_length=1)
    A: str
    B: str
    C: str
    D: str
    answer: str

    @model_validator(mode="after")
    def check_answer_is_an_option(self):
        if self.answer not in (self.A, self.B, self.C, self.D):
            raise ValueError(
                f"answer {self.answer!r} does not match any option of question {self.question!r}"
            )
        return self


class Question(QuestionCreate):
    """A stored question. The correct option is the one equal to ``answer``."""

    id: int


class ChaptersResponse(BaseModel):
    chapters: List[int]


class QuestionsResponse(BaseModel):
    questions: List[Question]
