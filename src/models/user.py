"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("fika_points >= 0", name="ck_users_fika_points_non_negative"),
    )

    user_id = Column(String, primary_key=True, index=True)
    google_id = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    picture = Column(String, nullable=True)
    referral_code = Column(String(6), unique=True, index=True, nullable=False)
    referred_by = Column(String, index=True, nullable=True)  # set at creation only
    fika_points = Column(Integer, nullable=False, default=100)
    created_at = Column(String, nullable=False)  # ISO format string

    quiz_scores = relationship(
        "QuizScoreModel",
        back_populates="user",
        order_by="QuizScoreModel.id",
        cascade="all, delete-orphan",
    )
    unlocked_modules = relationship(
        "UnlockedModuleModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )
