"""User management utilities.

This module provides user management functionality including account
creation from an external identity, referral codes and bonuses, referral
statistics, and the login sessions that back issued access tokens.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import pytz
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import (
    INITIAL_FIKA_POINTS,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    REFERRAL_SIGNUP_BONUS,
    REFERRER_REWARD,
    SESSION_EXPIRE_MINUTES,
)
from core.exceptions import UserNotFoundError
from models.login_session import LoginSessionModel
from models.user import UserModel
from schemas.progress import ReferralStatsResponse
from schemas.user import ExternalIdentity, User
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# Collisions are rare with 36^6 codes; give up rather than loop forever
MAX_REFERRAL_CODE_ATTEMPTS = 10


class UserAlreadyExistsError(Exception):
    """Exception raised when trying to create a user that already exists."""

    pass


def normalize_referral_code(code: Optional[str]) -> Optional[str]:
    """Strip and upper-case a referral code; blank codes become None."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def generate_referral_code(self) -> str:
        """Generate a referral code not used by any existing account.

        Returns:
            A REFERRAL_CODE_LENGTH character upper-case alphanumeric code.

        Raises:
            RuntimeError: If no free code was found.
        """
        for _ in range(MAX_REFERRAL_CODE_ATTEMPTS):
            code = "".join(
                secrets.choice(REFERRAL_CODE_ALPHABET)
                for _ in range(REFERRAL_CODE_LENGTH)
            )
            taken = (
                self.db.query(UserModel.user_id)
                .filter(UserModel.referral_code == code)
                .first()
            )
            if not taken:
                return code
        raise RuntimeError("Could not generate a unique referral code")

    def create_account(
        self,
        identity: ExternalIdentity,
        referral_code: Optional[str] = None,
    ) -> User:
        """Create a new account for an external identity.

        A present referral code raises the starting balance by
        REFERRAL_SIGNUP_BONUS whether or not it matches an account. The
        account owning the code, if any, is credited REFERRER_REWARD in the
        same transaction as the insert, so a failed insert leaves the
        referrer untouched.

        Args:
            identity: Verified identity from the OAuth provider.
            referral_code: Optional referral code captured at signup.

        Returns:
            Created User object.

        Raises:
            UserAlreadyExistsError: If the identity or email already has an account.
        """
        referred_by = normalize_referral_code(referral_code)
        initial_points = INITIAL_FIKA_POINTS
        if referred_by:
            initial_points += REFERRAL_SIGNUP_BONUS

        user = User(
            google_id=identity.google_id,
            email=identity.email,
            name=identity.name,
            picture=identity.picture,
            referral_code=self.generate_referral_code(),
            referred_by=referred_by,
            fika_points=initial_points,
        )

        try:
            if referred_by:
                result = self.db.execute(
                    update(UserModel)
                    .where(UserModel.referral_code == referred_by)
                    .values(fika_points=UserModel.fika_points + REFERRER_REWARD)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount:
                    logger.info(
                        "Credited %d points to referrer with code %s",
                        REFERRER_REWARD,
                        referred_by,
                    )
                else:
                    logger.info("Referral code %s matches no account", referred_by)
            self.db.add(user_to_model(user))
            self.db.commit()
        except IntegrityError as e:
            # Rolls back the referrer credit as well
            self.db.rollback()
            raise UserAlreadyExistsError(
                f"Account for '{identity.email}' already exists"
            ) from e

        logger.info("Created user %s (%s)", user.user_id, user.email)
        return user

    def login_with_identity(
        self,
        identity: ExternalIdentity,
        referral_code: Optional[str] = None,
    ) -> User:
        """Resolve an external identity to an account, creating it on first login.

        The referral code only matters for new accounts.

        Args:
            identity: Verified identity from the OAuth provider.
            referral_code: Optional referral code carried through the handshake.

        Returns:
            The existing or newly created User.
        """
        user = self.get_user_by_google_id(identity.google_id)
        if user is not None:
            return user
        try:
            return self.create_account(identity, referral_code)
        except UserAlreadyExistsError:
            # A concurrent callback for the same identity won the insert
            user = self.get_user_by_google_id(identity.google_id)
            if user is None:
                raise
            return user

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    def get_user_by_google_id(self, google_id: str) -> Optional[User]:
        """Get a user by the external provider id.

        Args:
            google_id: Provider subject id.

        Returns:
            User object if found, None otherwise.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.google_id == google_id)
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_referral_stats(self, user_id: str) -> ReferralStatsResponse:
        """Count signups made with a user's referral code.

        The points figure is derived from the count on every call and is
        not reconciled against the user's balance.

        Args:
            user_id: ID of the referring user.

        Returns:
            ReferralStatsResponse with code, count and earned points.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = self.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        count = (
            self.db.query(func.count(UserModel.user_id))
            .filter(UserModel.referred_by == user.referral_code)
            .scalar()
        )
        return ReferralStatsResponse(
            referral_code=user.referral_code,
            referral_count=count,
            referral_points=count * REFERRER_REWARD,
        )

    def create_login_session(self, user_id: str) -> LoginSessionModel:
        """Open a login session for a user.

        Args:
            user_id: ID of the user logging in.

        Returns:
            Created LoginSessionModel instance.
        """
        now = datetime.now(pytz.utc)
        model = LoginSessionModel(
            session_id=secrets.token_urlsafe(24),
            user_id=user_id,
            created_at=now.isoformat(),
            expires_at=(now + timedelta(minutes=SESSION_EXPIRE_MINUTES)).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Opened login session for user %s", user_id)
        return model

    def get_active_session(
        self, session_id: str, user_id: str
    ) -> Optional[LoginSessionModel]:
        """Get a login session if it exists, belongs to the user and is unexpired."""
        model = (
            self.db.query(LoginSessionModel)
            .filter(
                LoginSessionModel.session_id == session_id,
                LoginSessionModel.user_id == user_id,
            )
            .first()
        )
        if not model:
            return None
        expires_at = datetime.fromisoformat(model.expires_at.replace("Z", "+00:00"))
        if datetime.now(pytz.utc) > expires_at:
            return None
        return model

    def revoke_login_session(self, session_id: str) -> bool:
        """Delete a login session.

        Args:
            session_id: Session to revoke.

        Returns:
            True if a session was deleted.
        """
        deleted = (
            self.db.query(LoginSessionModel)
            .filter(LoginSessionModel.session_id == session_id)
            .delete()
        )
        self.db.commit()
        if deleted:
            logger.info("Revoked login session %s", session_id)
        return bool(deleted)
