"""Unlocked module database model.

One row per (user, chapter, module). The unique constraint keeps each
chapter's unlock set free of duplicates.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class UnlockedModuleModel(Base):
    __tablename__ = "unlocked_modules"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "chapter",
            "module",
            name="uq_unlocked_modules_user_chapter_module",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    chapter = Column(Integer, nullable=False)
    module = Column(Integer, nullable=False)
    unlocked_at = Column(String, nullable=False)  # ISO format string

    user = relationship("UserModel", back_populates="unlocked_modules")
