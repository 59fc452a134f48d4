"""User schema definitions.

This module defines the User data model and the identity asserted by the
external login provider.
"""

import secrets
from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, Field

from schemas.common import CamelModel


class ExternalIdentity(BaseModel):
    """A verified identity returned by the OAuth provider."""

    google_id: str = Field(description="Stable subject id issued by the provider.")
    email: str
    name: str
    picture: Optional[str] = None


class User(CamelModel):
    """structure of a user account"""

    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: secrets.token_hex(12),
    )
    google_id: str = Field(description="External provider id, unique per account.")
    email: str
    name: str
    picture: Optional[str] = None
    referral_code: str = Field(description="This user's own referral code.")
    referred_by: Optional[str] = Field(
        default=None,
        description="Referral code used at signup, if any. Never changes.",
    )
    fika_points: int = Field(default=100, ge=0)
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )


class CurrentUserResponse(CamelModel):
    user: User
