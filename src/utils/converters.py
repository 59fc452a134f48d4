"""Conversions between SQLAlchemy models and Pydantic schemas."""

from models.question import QuestionModel
from models.user import UserModel
from schemas.question import Question, QuestionCreate
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        google_id=user.google_id,
        email=user.email,
        name=user.name,
        picture=user.picture,
        referral_code=user.referral_code,
        referred_by=user.referred_by,
        fika_points=user.fika_points,
        created_at=user.created_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        google_id=model.google_id,
        email=model.email,
        name=model.name,
        picture=model.picture,
        referral_code=model.referral_code,
        referred_by=model.referred_by,
        fika_points=model.fika_points,
        created_at=model.created_at,
    )


def question_to_model(question: QuestionCreate) -> QuestionModel:
    return QuestionModel(
        chapter=question.chapter,
        question=question.question,
        option_a=question.A,
        option_b=question.B,
        option_c=question.C,
        option_d=question.D,
        answer=question.answer,
    )


def model_to_question(model: QuestionModel) -> Question:
    return Question(
        id=model.id,
        chapter=model.chapter,
        question=model.question,
        A=model.option_a,
        B=model.option_b,
        C=model.option_c,
        D=model.option_d,
        answer=model.answer,
    )
