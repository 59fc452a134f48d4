"""Question catalog and quiz routes.

This module handles HTTP endpoints for browsing chapters and questions and
for submitting quiz scores.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.params import parse_chapter, parse_chapter_and_module
from api.routes.auth import get_current_user
from core.dependencies import ProgressManagerDep, QuestionManagerDep
from core.exceptions import InvalidScoreError, UserNotFoundError
from schemas.progress import SubmitScoreRequest, SubmitScoreResponse
from schemas.question import ChaptersResponse, QuestionsResponse
from schemas.user import User

router = APIRouter(prefix="/api", tags=["Quiz"])


@router.get("/chapters", response_model=ChaptersResponse, summary="List chapters")
def list_chapters(question_manager: QuestionManagerDep) -> ChaptersResponse:
    """List every chapter that has questions, ascending."""
    return ChaptersResponse(chapters=question_manager.list_chapters())


@router.get(
    "/questions/{chapter}",
    response_model=QuestionsResponse,
    summary="Get the first questions of a chapter",
)
def list_questions(chapter: str, question_manager: QuestionManagerDep) -> QuestionsResponse:
    """Get up to the first 10 questions of a chapter.

    Args:
        chapter: Chapter number path segment.
        question_manager: Injected QuestionManager instance.

    Returns:
        QuestionsResponse in catalog order.

    Raises:
        HTTPException: 400 if chapter is not a number.
    """
    chapter_num = parse_chapter(chapter)
    return QuestionsResponse(questions=question_manager.list_questions(chapter_num))


@router.get(
    "/questions/{chapter}/{module}",
    response_model=QuestionsResponse,
    summary="Get the questions of a module",
)
def list_module_questions(
    chapter: str,
    module: str,
    question_manager: QuestionManagerDep,
    current_user: User = Depends(get_current_user),
) -> QuestionsResponse:
    """Get the 10-question slice for a module of a chapter.

    A module past the end of the chapter returns an empty list.

    Raises:
        HTTPException: 400 if chapter or module is not a number.
    """
    chapter_num, module_num = parse_chapter_and_module(chapter, module)
    return QuestionsResponse(
        questions=question_manager.list_module_questions(chapter_num, module_num)
    )


@router.post("/quiz/score", response_model=SubmitScoreResponse, summary="Save a quiz score")
def submit_score(
    req: SubmitScoreRequest,
    progress_manager: ProgressManagerDep,
    current_user: User = Depends(get_current_user),
) -> SubmitScoreResponse:
    """Save a completed quiz and award one Fika point per correct answer.

    Args:
        req: Chapter, score and total question count.
        progress_manager: Injected ProgressManager instance.
        current_user: Current authenticated user.

    Returns:
        SubmitScoreResponse with points earned and the new balance.

    Raises:
        HTTPException: 400 if the score exceeds the question count.
    """
    try:
        return progress_manager.submit_score(
            current_user.user_id, req.chapter, req.score, req.total_questions
        )
    except InvalidScoreError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
