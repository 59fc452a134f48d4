"""User progress, unlock and referral routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from api.params import parse_chapter_and_module
from api.routes.auth import get_current_user
from core.dependencies import ProgressManagerDep, UserManagerDep
from core.exceptions import (
    InsufficientPointsError,
    ModuleAlreadyUnlockedError,
    UserNotFoundError,
)
from schemas.progress import ProgressResponse, ReferralStatsResponse, UnlockResponse
from schemas.user import User

router = APIRouter(prefix="/api", tags=["Progress"])


@router.get("/user/progress", response_model=ProgressResponse, summary="Get quiz progress")
def get_progress(
    progress_manager: ProgressManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProgressResponse:
    """Get the caller's score history, Fika points and unlocked modules."""
    try:
        return progress_manager.get_progress(current_user.user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.post(
    "/unlock/{chapter}/{module}",
    response_model=UnlockResponse,
    summary="Unlock a module with Fika points",
)
def unlock_module(
    chapter: str,
    module: str,
    progress_manager: ProgressManagerDep,
    current_user: User = Depends(get_current_user),
) -> UnlockResponse:
    """Spend 10 Fika points to unlock a module.

    Args:
        chapter: Chapter number path segment.
        module: Module number path segment.
        progress_manager: Injected ProgressManager instance.
        current_user: Current authenticated user.

    Returns:
        UnlockResponse with the new balance and full unlock map.

    Raises:
        HTTPException: 400 on bad numbers or insufficient points, 409 if a
            concurrent request unlocked the same module.
    """
    chapter_num, module_num = parse_chapter_and_module(chapter, module)
    try:
        return progress_manager.unlock_module(
            current_user.user_id, chapter_num, module_num
        )
    except InsufficientPointsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ModuleAlreadyUnlockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.get(
    "/user/referrals",
    response_model=ReferralStatsResponse,
    summary="Get referral statistics",
)
def get_referral_stats(
    user_manager: UserManagerDep,
    current_user: User = Depends(get_current_user),
) -> ReferralStatsResponse:
    """Get the caller's referral code and how many signups used it."""
    try:
        return user_manager.get_referral_stats(current_user.user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
