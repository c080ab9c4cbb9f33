# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz API endpoints.

This module provides endpoints for quizzes:
- POST / - Author a quiz with its question bank
- GET /{quiz_id} - Get quiz metadata
- POST /{quiz_id}/attempts - Start an attempt
- POST /{quiz_id}/submit - Submit answers for grading
- GET /{quiz_id}/submissions - List the caller's submissions

Example:
    POST /api/v1/quizzes/quiz-1/submit
    {
        "attempt_id": "3f0c...",
        "answers": {"quiz-1-q1": "quiz-1-q1-o3"}
    }
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from apexlms.api.dependencies import (
    get_grading_service,
    get_quiz_service,
    require_auth,
    require_author,
)
from apexlms.api.middleware.auth import CurrentUser
from apexlms.domains.errors import InvalidInputError, NotFoundError
from apexlms.domains.grading import GradingService
from apexlms.domains.quiz import QuizService
from apexlms.models.quiz import (
    CreateQuizRequest,
    GradeResponse,
    QuizAttemptResponse,
    QuizResponse,
    SubmissionResponse,
    SubmitQuizRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create quiz",
    description="Author a quiz with its question bank. Instructor or admin only.",
)
async def create_quiz(
    data: CreateQuizRequest,
    current_user: CurrentUser = Depends(require_author),
    service: QuizService = Depends(get_quiz_service),
) -> QuizResponse:
    """Create a quiz.

    Args:
        data: Quiz definition.
        current_user: Authenticated author.
        service: Quiz service.

    Returns:
        The created quiz.
    """
    logger.info("Creating quiz: title=%s, by=%s", data.title, current_user.id)

    try:
        return await service.create_quiz(data)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.get(
    "/{quiz_id}",
    response_model=QuizResponse,
    summary="Get quiz",
)
async def get_quiz(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: QuizService = Depends(get_quiz_service),
) -> QuizResponse:
    """Get quiz metadata.

    Raises:
        HTTPException: If quiz not found.
    """
    try:
        return await service.get_quiz(quiz_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{quiz_id}/attempts",
    response_model=QuizAttemptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start quiz attempt",
    description=(
        "Start an attempt. Randomized quizzes present a sample of the question "
        "bank; the sample is fixed for the attempt and used when grading."
    ),
)
async def start_attempt(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: QuizService = Depends(get_quiz_service),
) -> QuizAttemptResponse:
    """Start a quiz attempt for the caller.

    Raises:
        HTTPException: If quiz not found.
    """
    try:
        return await service.start_attempt(quiz_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{quiz_id}/submit",
    response_model=GradeResponse,
    summary="Submit quiz",
    description="Grade the caller's answers and record the submission.",
)
async def submit_quiz(
    quiz_id: str,
    data: SubmitQuizRequest,
    current_user: CurrentUser = Depends(require_auth),
    service: GradingService = Depends(get_grading_service),
) -> GradeResponse:
    """Grade a quiz submission.

    Args:
        quiz_id: Quiz identifier.
        data: Answers and optional attempt identifier.
        current_user: Authenticated learner.
        service: Grading service.

    Returns:
        Score, pass flag and passing threshold.

    Raises:
        HTTPException: If the quiz or attempt is not found, or the
            submission is invalid.
    """
    try:
        result = await service.grade(
            quiz_id=quiz_id,
            answers=data.answers,
            learner_id=current_user.id,
            attempt_id=data.attempt_id,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return GradeResponse(
        score=result.score,
        passed=result.passed,
        passing_score=result.passing_score,
    )


@router.get(
    "/{quiz_id}/submissions",
    response_model=list[SubmissionResponse],
    summary="List my submissions",
)
async def list_submissions(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    service: QuizService = Depends(get_quiz_service),
) -> list[SubmissionResponse]:
    """List the caller's submissions for a quiz, oldest first.

    Raises:
        HTTPException: If quiz not found.
    """
    try:
        return await service.list_submissions(current_user.id, quiz_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
