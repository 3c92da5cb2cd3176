"""Tests for the quiz session state machine and scoring."""

import pytest

from onboarding.progress.exceptions import (
    ConfigurationError,
    InvalidAnswerError,
    QuizAlreadyFinishedError,
)
from onboarding.quiz.session import (
    QuizState,
    point_value,
    progress_update_for,
    quiz_progress_percent,
    round_half_up,
    select_option,
    start_session,
    submit_answer,
)


RIGHT, WRONG = 0, 1


def run_quiz(module, answers: list[int], pass_mark: int = 60):
    session = start_session("ana@school.org", module)
    for option in answers:
        session = submit_answer(session, module, option, pass_mark=pass_mark)
    return session


class TestRounding:
    """Tests for round_half_up and point_value."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.0, 0), (59.4, 59), (59.5, 60), (66.66, 67), (2.5, 3), (100.0, 100)],
    )
    def test_half_up(self, value: float, expected: int):
        """Halves round up, unlike Python's round()."""
        assert round_half_up(value) == expected

    def test_point_value(self):
        """Each question is worth an equal share of 100."""
        assert point_value(4) == 25
        assert point_value(3) == pytest.approx(33.333, abs=1e-3)


class TestScoring:
    """Final score and pass/fail."""

    def test_six_of_ten_passes(self, make_module):
        """N=10, K=6 scores 60 and passes."""
        module = make_module(n_questions=10)
        session = run_quiz(module, [RIGHT] * 6 + [WRONG] * 4)

        assert session.state == QuizState.FINISHED
        assert session.final_score == 60
        assert session.passed is True

    def test_five_of_ten_fails(self, make_module):
        """N=10, K=5 scores 50 and fails."""
        module = make_module(n_questions=10)
        session = run_quiz(module, [WRONG] * 5 + [RIGHT] * 5)

        assert session.final_score == 50
        assert session.passed is False

    @pytest.mark.parametrize(
        "n,k,expected",
        [(3, 2, 67), (3, 1, 33), (7, 4, 57), (8, 5, 63), (6, 0, 0), (6, 6, 100)],
    )
    def test_score_is_rounded_percentage(self, make_module, n, k, expected):
        """The score equals round_half_up(100 * K / N)."""
        module = make_module(n_questions=n)
        session = run_quiz(module, [RIGHT] * k + [WRONG] * (n - k))

        assert session.final_score == expected
        assert session.correct_answers == k
        assert session.passed is (expected >= 60)

    def test_configurable_pass_mark(self, make_module):
        """The pass mark is a policy value."""
        module = make_module(n_questions=2)
        session = run_quiz(module, [RIGHT, WRONG], pass_mark=40)
        assert session.passed is True


class TestTransitions:
    """Tests for start_session, select_option and submit_answer."""

    def test_start_session(self, make_module):
        """A session starts at question 0 with nothing scored."""
        session = start_session("ana@school.org", make_module())

        assert session.state == QuizState.IN_PROGRESS
        assert session.question_index == 0
        assert session.running_score == 0
        assert session.final_score is None

    def test_start_records_prior_attempts(self, make_module):
        """The stored failed-attempt count travels with the session."""
        module = make_module(n_questions=2)
        session = start_session("ana@school.org", module, attempts=2)

        session = submit_answer(session, module, WRONG)
        finished = submit_answer(session, module, WRONG)

        assert finished.attempts_before == 2
        update = progress_update_for(finished, finished.attempts_before)
        assert update["attempts"] == 3

    def test_start_without_questions(self, make_module):
        """Modules without questions cannot be started."""
        with pytest.raises(ConfigurationError):
            start_session("ana@school.org", make_module(n_questions=0))

    def test_sessions_are_immutable(self, make_module):
        """Transitions return new sessions."""
        module = make_module(n_questions=3)
        session = start_session("ana@school.org", module)

        advanced = submit_answer(session, module, RIGHT)

        assert session.question_index == 0
        assert advanced.question_index == 1

    def test_select_then_submit(self, make_module):
        """The selected option is submitted when none is given."""
        module = make_module(n_questions=2)
        session = select_option(start_session("a@b.org", module), module, RIGHT)

        assert session.selected_option == RIGHT
        session = submit_answer(session, module)
        assert session.correct_answers == 1
        assert session.selected_option is None

    def test_invalid_option(self, make_module):
        """Options must exist on the current question."""
        module = make_module()
        session = start_session("a@b.org", module)

        with pytest.raises(InvalidAnswerError):
            submit_answer(session, module, 3)
        with pytest.raises(InvalidAnswerError):
            select_option(session, module, -1)

    def test_finished_session_rejects_answers(self, make_module):
        """Answers after the last question are refused."""
        module = make_module(n_questions=1)
        session = run_quiz(module, [RIGHT])

        with pytest.raises(QuizAlreadyFinishedError):
            submit_answer(session, module, RIGHT)

    def test_session_bound_to_module(self, make_module):
        """A session cannot be answered against another module."""
        session = start_session("a@b.org", make_module())
        with pytest.raises(ValueError):
            submit_answer(session, make_module(), RIGHT)


class TestProgressUpdate:
    """Tests for progress_update_for and quiz_progress_percent."""

    def test_failure_increments_attempts(self, make_module):
        """A failed attempt adds one to attempts."""
        session = run_quiz(make_module(n_questions=2), [WRONG, WRONG])
        assert progress_update_for(session, 2) == {
            "score": 0,
            "passed": False,
            "attempts": 3,
        }

    def test_pass_keeps_attempts(self, make_module):
        """A pass leaves attempts as they were."""
        session = run_quiz(make_module(n_questions=2), [RIGHT, RIGHT])
        assert progress_update_for(session, 2) == {
            "score": 100,
            "passed": True,
            "attempts": 2,
        }

    def test_unfinished_session_has_no_update(self, make_module):
        """Only finished sessions produce an update."""
        session = start_session("a@b.org", make_module())
        with pytest.raises(ValueError):
            progress_update_for(session, 0)

    def test_progress_percent(self, make_module):
        """Answered share of the quiz."""
        module = make_module(n_questions=4)
        session = start_session("a@b.org", module)
        assert quiz_progress_percent(session, 4) == 0

        session = submit_answer(session, module, RIGHT)
        assert quiz_progress_percent(session, 4) == 25

        session = run_quiz(module, [RIGHT] * 4)
        assert quiz_progress_percent(session, 4) == 100
