"""Gating rules for the sequential curriculum.

Pure functions over `ProgressRecord` values; nothing here performs I/O.
A missing record (None) means the learner never touched the module.

Rules:
- A module is locked until the module before it in the role's curriculum has
  been passed. The first module is never locked.
- The quiz opens once the video is watched, unless the learner struck out.
- Strike-out: not passed after MAX_FAILED_ATTEMPTS consecutive failures. Only a
  re-watch (a full reset of the record) clears it.
"""

from collections.abc import Mapping, Sequence
from dataclasses import replace
from enum import Enum
from uuid import UUID

from onboarding.catalog.models import TrainingModule

from .exceptions import ConfigurationError
from .models import ProgressRecord


MAX_FAILED_ATTEMPTS = 3


class ModuleStatus(str, Enum):
    """What a learner can do with a module right now."""

    LOCKED = "locked"
    VIDEO_REQUIRED = "video_required"
    QUIZ_AVAILABLE = "quiz_available"
    STRIKE_OUT = "strike_out"
    PASSED = "passed"


def is_module_locked(
    modules: Sequence[TrainingModule],
    progress_by_module_id: Mapping[UUID, ProgressRecord],
    index: int,
) -> bool:
    """Check whether `modules[index]` is locked.

    `modules` must be one role's curriculum sorted by ordinal. Video state of
    the previous module is irrelevant, only its quiz result counts.

    Raises:
        IndexError: If index is outside the curriculum
    """
    if not 0 <= index < len(modules):
        msg = f"Module index {index} outside curriculum of {len(modules)}"
        raise IndexError(msg)
    if index == 0:
        return False

    previous = progress_by_module_id.get(modules[index - 1].id)
    return previous is None or not previous.passed


def is_video_required(progress: ProgressRecord | None) -> bool:
    """The video must be (re)watched before anything else."""
    return progress is None or not progress.video_watched


def is_strike_out(
    progress: ProgressRecord | None,
    max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
) -> bool:
    """Too many consecutive failures: a re-watch is mandatory."""
    if progress is None:
        return False
    return not progress.passed and progress.attempts >= max_failed_attempts


def is_quiz_accessible(
    progress: ProgressRecord | None,
    max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
) -> bool:
    """The quiz opens after the video, and stays shut during a strike-out."""
    if progress is None:
        return False
    return progress.video_watched and not is_strike_out(progress, max_failed_attempts)


def apply_rewatch(progress: ProgressRecord) -> ProgressRecord:
    """Full reset: video, score, pass and failed attempts all cleared."""
    return replace(
        progress,
        video_watched=False,
        score=None,
        passed=False,
        attempts=0,
    )


def mark_video_watched(progress: ProgressRecord) -> ProgressRecord:
    """Record the video as watched; idempotent."""
    if progress.video_watched:
        return progress
    return replace(progress, video_watched=True)


def ensure_quiz_configured(module: TrainingModule) -> None:
    """Raise ConfigurationError for modules that have no questions."""
    if not module.is_quiz_configured:
        raise ConfigurationError(f"Module '{module.title}' has no quiz configured")


def module_status(
    locked: bool,
    progress: ProgressRecord | None,
    max_failed_attempts: int = MAX_FAILED_ATTEMPTS,
) -> ModuleStatus:
    """Derive the single display status of a module."""
    if locked:
        return ModuleStatus.LOCKED
    if progress is not None and progress.passed:
        return ModuleStatus.PASSED
    if is_strike_out(progress, max_failed_attempts):
        return ModuleStatus.STRIKE_OUT
    if is_video_required(progress):
        return ModuleStatus.VIDEO_REQUIRED
    return ModuleStatus.QUIZ_AVAILABLE


def completion_percent(progress: ProgressRecord | None) -> int:
    """Progress bar value: 100 passed, 50 video watched, 0 otherwise."""
    if progress is None:
        return 0
    if progress.passed:
        return 100
    if progress.video_watched:
        return 50
    return 0
