"""Authentication routes.

This module handles the Google OAuth handshake, the login sessions that back
issued tokens, and the request-scoped authentication context consumed by
every other route.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Annotated, Optional

import pytz
from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import (
    FRONTEND_URL,
    GOOGLE_CALLBACK_URL,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_METADATA_URL,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    SESSION_EXPIRE_MINUTES,
)
from core.dependencies import UserManagerDep
from schemas.user import CurrentUserResponse, ExternalIdentity, User
from utils.user_manager import UserAlreadyExistsError, normalize_referral_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

# Key in the signed Starlette session holding the referral code between
# the redirect to Google and the callback
REFERRAL_SESSION_KEY = "referral_code"

# Tokens may come from the session cookie instead, so a missing header is fine
security = HTTPBearer(auto_error=False)

oauth = OAuth()
oauth.register(
    name="google",
    client_id=GOOGLE_CLIENT_ID,
    client_secret=GOOGLE_CLIENT_SECRET,
    server_metadata_url=GOOGLE_METADATA_URL,
    client_kwargs={"scope": "openid email profile"},
)


@dataclass
class AuthContext:
    """Who is making the current request, if anyone."""

    user: Optional[User] = None
    session_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def create_access_token(
    user_id: str, session_id: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token bound to a login session.

    Args:
        user_id: ID of the authenticated user.
        session_id: ID of the login session backing the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=SESSION_EXPIRE_MINUTES)
    to_encode = {
        "sub": user_id,
        "sid": session_id,
        "exp": datetime.now(pytz.utc) + expires_delta,
    }
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_auth_context(
    request: Request,
    user_manager: UserManagerDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """Resolve the caller from a bearer token or the session cookie.

    Invalid, expired or revoked tokens resolve to an anonymous context.

    Args:
        request: Incoming request.
        user_manager: Injected UserManager instance.
        credentials: Optional HTTP Bearer token credentials.

    Returns:
        AuthContext for this request.
    """
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return AuthContext()
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return AuthContext()

    user_id = payload.get("sub")
    session_id = payload.get("sid")
    if not user_id or not session_id:
        return AuthContext()
    if user_manager.get_active_session(session_id, user_id) is None:
        return AuthContext()
    user = user_manager.get_user_by_id(user_id)
    if user is None:
        return AuthContext()
    return AuthContext(user=user, session_id=session_id)


AuthContextDep = Annotated[AuthContext, Depends(get_auth_context)]


def get_current_user(auth: AuthContextDep) -> User:
    """Get current authenticated user.

    Args:
        auth: Request-scoped authentication context.

    Returns:
        Current User object.

    Raises:
        HTTPException: 401 if the request is not authenticated.
    """
    if not auth.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return auth.user


@router.get("/google", summary="Sign in with Google")
async def login_google(request: Request, ref: Optional[str] = None):
    """Start the Google OAuth handshake.

    Args:
        request: Incoming request.
        ref: Optional referral code to apply if this login creates an account.

    Returns:
        Redirect to Google's consent screen.
    """
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        logger.error("GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Google login is not configured.",
        )

    request.session.pop(REFERRAL_SESSION_KEY, None)
    referral_code = normalize_referral_code(ref)
    if referral_code:
        request.session[REFERRAL_SESSION_KEY] = referral_code
        logger.info("Login started with referral code %s", referral_code)
    return await oauth.google.authorize_redirect(request, GOOGLE_CALLBACK_URL)


@router.get("/google/callback", summary="Google OAuth callback")
async def google_callback(request: Request, user_manager: UserManagerDep):
    """Finish the handshake, open a login session and return to the frontend.

    Args:
        request: Incoming request carrying the authorization code.
        user_manager: Injected UserManager instance.

    Returns:
        Redirect to the chapters page with the session cookie set, or to the
        login page if the handshake failed or the email belongs to another
        account.
    """
    try:
        token = await oauth.google.authorize_access_token(request)
    except OAuthError as e:
        logger.warning("Google login failed: %s", e.error)
        return RedirectResponse(f"{FRONTEND_URL}/login", status_code=status.HTTP_302_FOUND)

    userinfo = token.get("userinfo")
    if not userinfo or not userinfo.get("sub") or not userinfo.get("email"):
        logger.warning("Google login returned no usable userinfo")
        return RedirectResponse(f"{FRONTEND_URL}/login", status_code=status.HTTP_302_FOUND)

    identity = ExternalIdentity(
        google_id=userinfo["sub"],
        email=userinfo["email"],
        name=userinfo.get("name") or userinfo["email"],
        picture=userinfo.get("picture"),
    )
    referral_code = request.session.pop(REFERRAL_SESSION_KEY, None)
    try:
        user = user_manager.login_with_identity(identity, referral_code)
    except UserAlreadyExistsError as e:
        logger.warning("Google login for %s rejected: %s", identity.google_id, e)
        return RedirectResponse(f"{FRONTEND_URL}/login", status_code=status.HTTP_302_FOUND)
    login_session = user_manager.create_login_session(user.user_id)
    access_token = create_access_token(user.user_id, login_session.session_id)

    response = RedirectResponse(f"{FRONTEND_URL}/chapters", status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=access_token,
        max_age=SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    logger.info("User %s logged in", user.user_id)
    return response


@router.get("/user", response_model=CurrentUserResponse, summary="Get current user")
def get_current_user_info(auth: AuthContextDep) -> CurrentUserResponse:
    """Get current authenticated user information.

    Args:
        auth: Request-scoped authentication context.

    Returns:
        CurrentUserResponse with user information.

    Raises:
        HTTPException: 401 if the request is not authenticated.
    """
    if not auth.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return CurrentUserResponse(user=auth.user)


@router.get("/logout", summary="Log out")
def logout(
    response: Response,
    auth: AuthContextDep,
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    """Revoke the caller's login session and clear the cookie.

    Returns:
        Dictionary with success message.
    """
    user_manager.revoke_login_session(auth.session_id)
    response.delete_cookie(SESSION_COOKIE_NAME)
    logger.info("User %s logged out", current_user.user_id)
    return {"message": "Logged out successfully"}
