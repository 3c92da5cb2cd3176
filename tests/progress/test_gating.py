"""Tests for curriculum gating rules."""

from uuid import uuid4

import pytest

from onboarding.progress.exceptions import ConfigurationError
from onboarding.progress.gating import (
    ModuleStatus,
    apply_rewatch,
    completion_percent,
    ensure_quiz_configured,
    is_module_locked,
    is_quiz_accessible,
    is_strike_out,
    is_video_required,
    mark_video_watched,
    module_status,
)
from onboarding.progress.models import ProgressRecord


def record(module_id=None, **fields) -> ProgressRecord:
    return ProgressRecord(
        learner_id="ana@school.org", module_id=module_id or uuid4(), **fields
    )


class TestIsModuleLocked:
    """Tests for is_module_locked."""

    def test_first_module_never_locked(self, make_module):
        """Index 0 is open whatever the progress."""
        modules = [make_module(ordinal=0), make_module(ordinal=1)]
        assert is_module_locked(modules, {}, 0) is False

    def test_locked_without_previous_record(self, make_module):
        """No record on the previous module keeps the next one locked."""
        modules = [make_module(ordinal=0), make_module(ordinal=1)]
        assert is_module_locked(modules, {}, 1) is True

    def test_locked_until_previous_passed(self, make_module):
        """Watching the previous video is not enough."""
        first, second = make_module(ordinal=0), make_module(ordinal=1)
        progress = {first.id: record(first.id, video_watched=True, attempts=2)}
        assert is_module_locked([first, second], progress, 1) is True

    def test_unlocked_after_previous_passed(self, make_module):
        """Passing the previous quiz unlocks the next module."""
        first, second = make_module(ordinal=0), make_module(ordinal=1)
        progress = {first.id: record(first.id, passed=True, score=80)}
        assert is_module_locked([first, second], progress, 1) is False

    def test_only_direct_predecessor_counts(self, make_module):
        """Module 2 depends on module 1 only."""
        a, b, c = (make_module(ordinal=i) for i in range(3))
        progress = {b.id: record(b.id, passed=True)}
        assert is_module_locked([a, b, c], progress, 2) is False

    def test_index_out_of_range(self, make_module):
        """Indexes outside the curriculum raise IndexError."""
        with pytest.raises(IndexError):
            is_module_locked([make_module()], {}, 1)


class TestStrikeOut:
    """Tests for is_strike_out and is_quiz_accessible."""

    @pytest.mark.parametrize(
        "attempts,passed,expected",
        [
            (0, False, False),
            (2, False, False),
            (3, False, True),
            (4, False, True),
            (3, True, False),
        ],
    )
    def test_strike_out(self, attempts: int, passed: bool, expected: bool):
        """Strike-out is three failures without a pass."""
        assert is_strike_out(record(attempts=attempts, passed=passed)) is expected

    def test_no_record_is_not_strike_out(self):
        """Untouched modules are not struck out."""
        assert is_strike_out(None) is False

    def test_custom_limit(self):
        """The failure limit is configurable."""
        assert is_strike_out(record(attempts=2), max_failed_attempts=2) is True

    def test_quiz_needs_video(self):
        """The quiz opens only after the video."""
        assert is_quiz_accessible(None) is False
        assert is_quiz_accessible(record()) is False
        assert is_quiz_accessible(record(video_watched=True)) is True

    def test_quiz_closed_during_strike_out(self):
        """A strike-out shuts the quiz even with the video watched."""
        assert is_quiz_accessible(record(video_watched=True, attempts=3)) is False

    def test_video_required(self):
        """Video is required until watched."""
        assert is_video_required(None) is True
        assert is_video_required(record(video_watched=True)) is False


class TestTransitions:
    """Tests for apply_rewatch and mark_video_watched."""

    def test_rewatch_resets_everything(self):
        """Re-watch clears video, score, pass and attempts."""
        original = record(video_watched=True, score=40, passed=False, attempts=3)

        reset = apply_rewatch(original)

        assert reset.video_watched is False
        assert reset.score is None
        assert reset.passed is False
        assert reset.attempts == 0
        assert reset.module_id == original.module_id
        assert is_strike_out(reset) is False

    def test_rewatch_after_pass(self):
        """Re-watch resets a passed module as well."""
        reset = apply_rewatch(record(video_watched=True, score=90, passed=True))
        assert reset.passed is False
        assert reset.score is None

    def test_mark_video_watched_only_sets_video(self):
        """Only video_watched changes."""
        original = record(score=None, attempts=2)
        watched = mark_video_watched(original)
        assert watched.video_watched is True
        assert watched.attempts == 2

    def test_mark_video_watched_idempotent(self):
        """Marking twice equals marking once."""
        once = mark_video_watched(record())
        assert mark_video_watched(once) == once


class TestModuleStatus:
    """Tests for module_status and completion_percent."""

    def test_status_order(self):
        """Lock wins over everything, then pass, strike-out, video, quiz."""
        passed = record(video_watched=True, passed=True, score=70)
        struck = record(video_watched=True, attempts=3)
        watched = record(video_watched=True)

        assert module_status(True, passed) == ModuleStatus.LOCKED
        assert module_status(False, passed) == ModuleStatus.PASSED
        assert module_status(False, struck) == ModuleStatus.STRIKE_OUT
        assert module_status(False, None) == ModuleStatus.VIDEO_REQUIRED
        assert module_status(False, watched) == ModuleStatus.QUIZ_AVAILABLE

    def test_completion_percent(self):
        """Passed 100, video watched 50, otherwise 0."""
        assert completion_percent(None) == 0
        assert completion_percent(record(video_watched=True)) == 50
        assert completion_percent(record(video_watched=True, passed=True)) == 100


def test_ensure_quiz_configured(make_module):
    """Modules without questions cannot be quizzed."""
    ensure_quiz_configured(make_module(n_questions=1))
    with pytest.raises(ConfigurationError) as exc_info:
        ensure_quiz_configured(make_module(n_questions=0))
    assert exc_info.value.code == "module_not_configured"
