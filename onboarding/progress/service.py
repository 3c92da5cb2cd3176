"""Learner training service layer.

Business logic for:
- Dashboard: the learner's curriculum with lock state and status per module
- Video completion and the mandatory re-watch after a strike-out
- Quiz lifecycle: start, answer, abandon, and writing the result back
- Account deletion cleanup

Each operation loads the learner's progress, applies the pure gating and quiz
transitions, and writes the resulting fields through the progress gateway.
Gateway failures propagate to the caller; nothing is reported as saved unless
the gateway accepted it.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog

from onboarding.auth.schemas import LearnerIdentity
from onboarding.catalog.models import TrainingModule
from onboarding.catalog.service import (
    DEFAULT_FOLDER,
    CatalogService,
    ModuleNotFoundError,
)
from onboarding.quiz import session as quiz
from onboarding.quiz.session import QuizSession
from onboarding.quiz.store import QuizSessionStore

from . import gating
from .exceptions import (
    ModuleLockedError,
    NoActiveQuizError,
    QuizNotAccessibleError,
    TrainingError,
)
from .gateway import ProgressGateway
from .models import ProgressRecord


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ModuleView:
    """A module as one learner currently sees it."""

    module: TrainingModule
    index: int
    locked: bool
    status: gating.ModuleStatus
    progress: ProgressRecord | None
    completion_percent: int


@dataclass(frozen=True)
class QuizResult:
    """Outcome of a finished and saved quiz attempt."""

    session: QuizSession
    progress: ProgressRecord
    strike_out: bool


class TrainingService:
    """Drives one learner through the curriculum of their role."""

    def __init__(
        self,
        catalog: CatalogService,
        gateway: ProgressGateway,
        sessions: QuizSessionStore,
        pass_mark: int = quiz.PASS_MARK,
        max_failed_attempts: int = gating.MAX_FAILED_ATTEMPTS,
        default_folder: str = DEFAULT_FOLDER,
    ):
        self.catalog = catalog
        self.gateway = gateway
        self.sessions = sessions
        self.pass_mark = pass_mark
        self.max_failed_attempts = max_failed_attempts
        self.default_folder = default_folder

    # ==========================================================================
    # Dashboard
    # ==========================================================================

    async def _progress_map(self, learner_id: str) -> dict[UUID, ProgressRecord]:
        records = await self.gateway.list_progress(learner_id)
        return {r.module_id: r for r in records}

    def _build_views(
        self,
        modules: list[TrainingModule],
        progress: dict[UUID, ProgressRecord],
    ) -> list[ModuleView]:
        views = []
        for index, module in enumerate(modules):
            record = progress.get(module.id)
            locked = gating.is_module_locked(modules, progress, index)
            views.append(
                ModuleView(
                    module=module,
                    index=index,
                    locked=locked,
                    status=gating.module_status(
                        locked, record, self.max_failed_attempts
                    ),
                    progress=record,
                    completion_percent=gating.completion_percent(record),
                )
            )
        return views

    async def get_dashboard(self, identity: LearnerIdentity) -> list[ModuleView]:
        """Get the learner's curriculum in order, with gating applied."""
        modules = await self.catalog.list_modules(identity.role)
        progress = await self._progress_map(identity.learner_id)
        return self._build_views(modules, progress)

    def group_by_folder(self, views: list[ModuleView]) -> dict[str, list[ModuleView]]:
        """Group views by folder, keeping curriculum order inside each folder."""
        groups: dict[str, list[ModuleView]] = {}
        for view in views:
            folder = view.module.folder_name(self.default_folder)
            groups.setdefault(folder, []).append(view)
        return groups

    async def get_module_view(
        self, identity: LearnerIdentity, module_id: UUID
    ) -> ModuleView:
        """Get one unlocked module of the learner's curriculum.

        Raises:
            ModuleNotFoundError: If the module is not in the learner's curriculum
            ModuleLockedError: If the previous module has not been passed
        """
        views = await self.get_dashboard(identity)
        for view in views:
            if view.module.id == module_id:
                if view.locked:
                    raise ModuleLockedError
                return view

        raise ModuleNotFoundError

    async def list_progress(self, identity: LearnerIdentity) -> list[ProgressRecord]:
        """Get every progress record of the learner."""
        return await self.gateway.list_progress(identity.learner_id)

    # ==========================================================================
    # Video
    # ==========================================================================

    async def mark_video_watched(
        self, identity: LearnerIdentity, module_id: UUID
    ) -> ProgressRecord:
        """Record the module's video as watched (idempotent)."""
        view = await self.get_module_view(identity, module_id)
        current = view.progress or ProgressRecord(
            learner_id=identity.learner_id, module_id=module_id
        )
        updated = gating.mark_video_watched(current)
        record = await self.gateway.write_progress(
            identity.learner_id, module_id, video_watched=updated.video_watched
        )
        logger.info("video_watched", module_id=str(module_id))
        return record

    async def rewatch(
        self, identity: LearnerIdentity, module_id: UUID
    ) -> ProgressRecord:
        """Reset the module so the video must be watched again.

        Clears score, pass and failed attempts. Any quiz in progress on the
        module is discarded. Drive videos open straight away on re-watch and
        count as watched again.
        """
        view = await self.get_module_view(identity, module_id)
        current = view.progress or ProgressRecord(
            learner_id=identity.learner_id, module_id=module_id
        )
        reset = gating.apply_rewatch(current)
        if view.module.watched_on_open:
            reset = gating.mark_video_watched(reset)

        active = await self.sessions.get(identity.learner_id)
        if active is not None and active.module_id == module_id:
            await self.sessions.discard(identity.learner_id)

        record = await self.gateway.write_progress(
            identity.learner_id,
            module_id,
            video_watched=reset.video_watched,
            score=reset.score,
            passed=reset.passed,
            attempts=reset.attempts,
        )
        logger.info(
            "module_rewatch_started",
            module_id=str(module_id),
            previous_attempts=current.attempts,
        )
        return record

    # ==========================================================================
    # Quiz
    # ==========================================================================

    async def start_quiz(
        self, identity: LearnerIdentity, module_id: UUID
    ) -> QuizSession:
        """Open a fresh quiz attempt, replacing any session the learner had.

        The stored score is cleared immediately: an attempt is under way and
        the previous score no longer stands. The session is stored first; if
        clearing the score fails, the new session is dropped again.

        Raises:
            ModuleLockedError: If the module is locked
            ConfigurationError: If the module has no questions
            QuizNotAccessibleError: Video not watched, strike-out, or passed
        """
        view = await self.get_module_view(identity, module_id)
        gating.ensure_quiz_configured(view.module)

        progress = view.progress
        if progress is not None and progress.passed:
            raise QuizNotAccessibleError("Quiz already passed")
        if gating.is_strike_out(progress, self.max_failed_attempts):
            raise QuizNotAccessibleError(
                "Maximum attempts reached, re-watch the video to try again"
            )
        if not gating.is_quiz_accessible(progress, self.max_failed_attempts):
            raise QuizNotAccessibleError("Watch the video to unlock the quiz")

        session = quiz.start_session(
            identity.learner_id,
            view.module,
            attempts=progress.attempts if progress else 0,
        )
        replaced = await self.sessions.get(identity.learner_id)
        await self.sessions.save(session)
        try:
            await self.gateway.write_progress(
                identity.learner_id, module_id, score=None
            )
        except TrainingError:
            await self.sessions.discard(identity.learner_id)
            raise

        logger.info(
            "quiz_started",
            module_id=str(module_id),
            questions=len(view.module.questions),
            attempt=session.attempts_before + 1,
            replaced_session=str(replaced.module_id) if replaced else None,
        )
        return session

    async def current_quiz(
        self, identity: LearnerIdentity
    ) -> tuple[QuizSession, TrainingModule]:
        """Get the learner's active session and its module.

        Raises:
            NoActiveQuizError: If there is no session
        """
        session = await self.sessions.get(identity.learner_id)
        if session is None:
            raise NoActiveQuizError
        module = await self.catalog.get_module(session.module_id)
        return session, module

    async def select_option(
        self, identity: LearnerIdentity, option: int
    ) -> QuizSession:
        """Remember the learner's choice for the current question."""
        session, module = await self.current_quiz(identity)
        session = quiz.select_option(session, module, option)
        await self.sessions.save(session)
        return session

    async def submit_answer(
        self, identity: LearnerIdentity, selected_option: int | None = None
    ) -> QuizSession | QuizResult:
        """Answer the current question.

        Returns the advanced session while questions remain, and the saved
        QuizResult once the last question is answered.
        """
        session, module = await self.current_quiz(identity)
        session = quiz.submit_answer(
            session, module, selected_option, pass_mark=self.pass_mark
        )
        await self.sessions.save(session)

        if not session.finished:
            return session
        return await self._save_result(identity, session)

    async def retry_save_result(self, identity: LearnerIdentity) -> QuizResult:
        """Write a finished attempt whose result could not be saved earlier."""
        session, _ = await self.current_quiz(identity)
        if not session.finished:
            raise NoActiveQuizError("No finished quiz waiting to be saved")
        return await self._save_result(identity, session)

    async def _save_result(
        self, identity: LearnerIdentity, session: QuizSession
    ) -> QuizResult:
        """Write the finished attempt; the session is kept if the write fails."""
        update = quiz.progress_update_for(session, session.attempts_before)
        try:
            record = await self.gateway.write_progress(
                identity.learner_id, session.module_id, **update
            )
        except TrainingError as e:
            logger.error(
                "quiz_result_not_saved",
                module_id=str(session.module_id),
                score=session.final_score,
                error_code=e.code,
            )
            raise

        await self.sessions.discard(identity.learner_id)

        strike_out = gating.is_strike_out(record, self.max_failed_attempts)
        logger.info(
            "quiz_finished",
            module_id=str(session.module_id),
            score=record.score,
            passed=record.passed,
            attempts=record.attempts,
            strike_out=strike_out,
        )
        return QuizResult(session=session, progress=record, strike_out=strike_out)

    async def abandon_quiz(self, identity: LearnerIdentity) -> bool:
        """Walk away from the active quiz; progress is left untouched."""
        discarded = await self.sessions.discard(identity.learner_id)
        if discarded:
            logger.info("quiz_abandoned")
        return discarded

    # ==========================================================================
    # Account Deletion
    # ==========================================================================

    async def delete_learner(self, learner_id: str) -> None:
        """Remove all progress and any quiz session of a deleted account."""
        await self.sessions.discard(learner_id)
        await self.gateway.delete_learner_progress(learner_id)
        logger.info("learner_training_data_deleted", learner_id=learner_id)
