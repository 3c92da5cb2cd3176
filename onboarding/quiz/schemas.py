"""Pydantic schemas for quiz taking.

The correct answer index never leaves the server through these schemas.
"""

from uuid import UUID

from pydantic import BaseModel, Field

from onboarding.catalog.models import TrainingModule

from .session import QuizSession, QuizState, quiz_progress_percent


class QuestionView(BaseModel):
    """Current question as shown to the learner."""

    index: int
    text: str
    options: list[str]


class QuizSessionResponse(BaseModel):
    """Learner-facing view of the active quiz session."""

    module_id: UUID
    module_title: str
    state: QuizState
    question_index: int
    total_questions: int
    progress_percent: int
    question: QuestionView | None = None
    selected_option: int | None = None
    final_score: int | None = None
    passed: bool | None = None

    @classmethod
    def from_session(
        cls, session: QuizSession, module: TrainingModule
    ) -> "QuizSessionResponse":
        """Create response from a session and its module."""
        total = len(module.questions)
        question = None
        if not session.finished and session.question_index < total:
            current = module.questions[session.question_index]
            question = QuestionView(
                index=session.question_index,
                text=current.text,
                options=list(current.options),
            )
        return cls(
            module_id=module.id,
            module_title=module.title,
            state=session.state,
            question_index=session.question_index,
            total_questions=total,
            progress_percent=quiz_progress_percent(session, total),
            question=question,
            selected_option=session.selected_option,
            final_score=session.final_score,
            passed=session.passed,
        )


class SelectOptionRequest(BaseModel):
    """Choice for the current question, kept until it is submitted."""

    option: int = Field(..., ge=0)


class SubmitAnswerRequest(BaseModel):
    """Answer to the current question.

    Without `selected_option` the previously selected option is submitted.
    """

    selected_option: int | None = Field(None, ge=0)


class QuizResultResponse(BaseModel):
    """Saved outcome of a finished attempt."""

    module_id: UUID
    score: int
    passed: bool
    attempts: int
    correct_answers: int
    total_questions: int
    strike_out: bool


class AnswerResponse(BaseModel):
    """Either the next question or the saved result."""

    finished: bool
    session: QuizSessionResponse | None = None
    result: QuizResultResponse | None = None
