"""Quiz session state machine.

    NOT_STARTED -> IN_PROGRESS(question_index) -> FINISHED(passed, score)

Sessions are immutable values; every transition returns a new session. Nothing
here is persisted: the host keeps the learner's single active session and only
the FINISHED transition produces a progress update.

Scoring: each question is worth 100 / len(questions) points as a float; the
running total is rounded once, half-up, when the last answer comes in. A
rounded score of at least the pass mark (60) passes.
"""

import math
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from onboarding.catalog.models import TrainingModule
from onboarding.progress.exceptions import (
    InvalidAnswerError,
    QuizAlreadyFinishedError,
)
from onboarding.progress.gating import ensure_quiz_configured


PASS_MARK = 60


class QuizState(str, Enum):
    """Quiz session lifecycle."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class QuizSession(BaseModel):
    """One learner's attempt at one module's quiz."""

    model_config = ConfigDict(frozen=True)

    learner_id: str
    module_id: UUID
    state: QuizState = QuizState.NOT_STARTED
    question_index: int = Field(default=0, ge=0)
    running_score: float = Field(default=0.0, ge=0)
    selected_option: int | None = None
    correct_answers: int = 0
    final_score: int | None = None
    passed: bool | None = None
    # Failed attempts on record when this attempt started
    attempts_before: int = Field(default=0, ge=0)
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def finished(self) -> bool:
        return self.state == QuizState.FINISHED


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def point_value(total_questions: int) -> float:
    """Points a single correct answer is worth."""
    return 100 / total_questions


def start_session(
    learner_id: str, module: TrainingModule, attempts: int = 0
) -> QuizSession:
    """Open a fresh attempt at question 0 with nothing scored.

    `attempts` is the failed-attempt count stored when the attempt starts. The
    finished session's progress update is computed from it, which keeps saving
    the same result idempotent.

    Raises:
        ConfigurationError: If the module has no questions
    """
    ensure_quiz_configured(module)
    return QuizSession(
        learner_id=learner_id,
        module_id=module.id,
        state=QuizState.IN_PROGRESS,
        attempts_before=attempts,
    )


def _check_option(module: TrainingModule, session: QuizSession, option: int) -> None:
    question = module.questions[session.question_index]
    if not 0 <= option < len(question.options):
        raise InvalidAnswerError


def _check_in_progress(session: QuizSession, module: TrainingModule) -> None:
    if session.finished:
        raise QuizAlreadyFinishedError
    if session.module_id != module.id:
        msg = "Session belongs to a different module"
        raise ValueError(msg)
    ensure_quiz_configured(module)


def select_option(
    session: QuizSession, module: TrainingModule, option: int
) -> QuizSession:
    """Remember the option the learner picked for the current question."""
    _check_in_progress(session, module)
    _check_option(module, session, option)
    return session.model_copy(update={"selected_option": option})


def submit_answer(
    session: QuizSession,
    module: TrainingModule,
    selected_option: int | None = None,
    pass_mark: int = PASS_MARK,
) -> QuizSession:
    """Answer the current question and advance or finish.

    `selected_option` falls back to the option chosen with `select_option`.

    Raises:
        QuizAlreadyFinishedError: If the session already finished
        InvalidAnswerError: If no option is selected or it does not exist
    """
    _check_in_progress(session, module)

    option = selected_option if selected_option is not None else session.selected_option
    if option is None:
        raise InvalidAnswerError("Select an option first")
    _check_option(module, session, option)

    total = len(module.questions)
    question = module.questions[session.question_index]
    is_correct = option == question.correct_answer_index

    running_score = session.running_score
    correct_answers = session.correct_answers
    if is_correct:
        running_score += point_value(total)
        correct_answers += 1

    if session.question_index < total - 1:
        return session.model_copy(
            update={
                "question_index": session.question_index + 1,
                "running_score": running_score,
                "correct_answers": correct_answers,
                "selected_option": None,
            }
        )

    final_score = round_half_up(running_score)
    return session.model_copy(
        update={
            "state": QuizState.FINISHED,
            "running_score": running_score,
            "correct_answers": correct_answers,
            "selected_option": option,
            "final_score": final_score,
            "passed": final_score >= pass_mark,
        }
    )


def progress_update_for(session: QuizSession, attempts: int) -> dict[str, Any]:
    """Progress fields written when a session finishes.

    A failed attempt increments `attempts`; a pass leaves it exactly as it was.
    """
    if not session.finished:
        msg = "Only finished sessions produce a progress update"
        raise ValueError(msg)
    return {
        "score": session.final_score,
        "passed": session.passed,
        "attempts": attempts if session.passed else attempts + 1,
    }


def quiz_progress_percent(session: QuizSession, total_questions: int) -> int:
    """Share of questions already answered, for the progress indicator."""
    if session.finished:
        return 100
    return round_half_up(session.question_index / total_questions * 100)
