"""Quiz taking API endpoints.

A learner has at most one active quiz. Starting a quiz replaces any earlier
session; answering the last question writes the result to the learner's
progress and closes the session.
"""

from uuid import UUID

from fastapi import APIRouter, status

from onboarding.auth.dependencies import CurrentLearner
from onboarding.catalog.dependencies import handle_catalog_error
from onboarding.catalog.service import CatalogError
from onboarding.progress.dependencies import TrainingServiceDep, handle_training_error
from onboarding.progress.exceptions import TrainingError
from onboarding.progress.service import QuizResult

from .schemas import (
    AnswerResponse,
    QuizResultResponse,
    QuizSessionResponse,
    SelectOptionRequest,
    SubmitAnswerRequest,
)


router = APIRouter(prefix="/v1/quiz", tags=["quiz"])


def _result_response(result: QuizResult, total_questions: int) -> QuizResultResponse:
    return QuizResultResponse(
        module_id=result.progress.module_id,
        score=result.progress.score or 0,
        passed=result.progress.passed,
        attempts=result.progress.attempts,
        correct_answers=result.session.correct_answers,
        total_questions=total_questions,
        strike_out=result.strike_out,
    )


@router.post(
    "/{module_id}/start",
    response_model=QuizSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start quiz",
)
async def start_quiz(
    module_id: UUID,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> QuizSessionResponse:
    """Open a fresh attempt at the module's quiz.

    Requires the video to be watched and no strike-out. The previous score is
    cleared as soon as the attempt starts.
    """
    try:
        session = await training.start_quiz(learner, module_id)
        module = await training.catalog.get_module(module_id)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return QuizSessionResponse.from_session(session, module)


@router.get("/current", response_model=QuizSessionResponse, summary="Current quiz")
async def current_quiz(
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> QuizSessionResponse:
    """Get the current question of the active quiz."""
    try:
        session, module = await training.current_quiz(learner)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return QuizSessionResponse.from_session(session, module)


@router.put(
    "/current/selection",
    response_model=QuizSessionResponse,
    summary="Select option",
)
async def select_option(
    data: SelectOptionRequest,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> QuizSessionResponse:
    """Remember the chosen option for the current question."""
    try:
        session = await training.select_option(learner, data.option)
        _, module = await training.current_quiz(learner)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return QuizSessionResponse.from_session(session, module)


@router.post(
    "/current/answer",
    response_model=AnswerResponse,
    summary="Submit answer",
)
async def submit_answer(
    data: SubmitAnswerRequest,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> AnswerResponse:
    """Answer the current question.

    Returns the next question, or the saved result after the last one.
    """
    try:
        _, module = await training.current_quiz(learner)
        outcome = await training.submit_answer(learner, data.selected_option)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e

    if isinstance(outcome, QuizResult):
        return AnswerResponse(
            finished=True,
            result=_result_response(outcome, len(module.questions)),
        )
    return AnswerResponse(
        finished=False,
        session=QuizSessionResponse.from_session(outcome, module),
    )


@router.post(
    "/current/result",
    response_model=QuizResultResponse,
    summary="Retry saving result",
)
async def retry_save_result(
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> QuizResultResponse:
    """Save a finished attempt whose result could not be written earlier."""
    try:
        _, module = await training.current_quiz(learner)
        result = await training.retry_save_result(learner)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return _result_response(result, len(module.questions))


@router.delete(
    "/current",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Abandon quiz",
)
async def abandon_quiz(
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> None:
    """Leave the active quiz. The attempt is not counted."""
    try:
        await training.abandon_quiz(learner)
    except TrainingError as e:
        raise handle_training_error(e) from e
