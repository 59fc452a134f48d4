"""Login session database model.

A session row backs every issued access token; deleting the row on logout
invalidates the token.
"""

from sqlalchemy import Column, ForeignKey, String

from .base import Base


class LoginSessionModel(Base):
    """Login session database model."""

    __tablename__ = "login_sessions"

    session_id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    created_at = Column(String, nullable=False)  # ISO format string
    expires_at = Column(String, nullable=False)  # ISO format string
