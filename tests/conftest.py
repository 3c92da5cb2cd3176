"""Shared test fixtures.

The app runs with in-memory storage: Cassandra and Redis are disabled before
the application module is imported.
"""

import os
import tempfile
from collections.abc import Callable, Iterator
from uuid import uuid4

import pytest


os.environ["ENVIRONMENT"] = "testing"
os.environ["CASSANDRA_ENABLED"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="onboarding-logs-")

from fastapi.testclient import TestClient  # noqa: E402

from onboarding.auth.permissions import AdminScope, StaffRole  # noqa: E402
from onboarding.auth.schemas import LearnerIdentity  # noqa: E402
from onboarding.auth.security import create_access_token  # noqa: E402
from onboarding.catalog.models import Question, TrainingModule  # noqa: E402
from onboarding.main import app  # noqa: E402


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client with a fresh in-memory application state."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[[LearnerIdentity], dict[str, str]]:
    """Build the bearer header for an identity."""

    def _headers(identity: LearnerIdentity) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(identity)}"}

    return _headers


@pytest.fixture
def teacher() -> LearnerIdentity:
    return LearnerIdentity(learner_id="ana@school.org", role=StaffRole.TEACHER)


@pytest.fixture
def hr_admin() -> LearnerIdentity:
    return LearnerIdentity(
        learner_id="hr@school.org",
        role=StaffRole.ADMIN,
        admin_scope=AdminScope.ALL,
    )


@pytest.fixture
def make_module() -> Callable[..., TrainingModule]:
    """Factory for modules with `n_questions` questions answered by option 0."""

    def _make(
        ordinal: int = 0,
        role: StaffRole = StaffRole.TEACHER,
        n_questions: int = 2,
        **kwargs,
    ) -> TrainingModule:
        questions = tuple(
            Question(
                text=f"Question {i + 1}?",
                options=("right", "wrong", "also wrong"),
                correct_answer_index=0,
            )
            for i in range(n_questions)
        )
        defaults = {
            "id": uuid4(),
            "title": f"Module {ordinal}",
            "role": role,
            "ordinal": ordinal,
            "video_url": "https://videos.example.org/intro.mp4",
            "questions": questions,
        }
        defaults.update(kwargs)
        return TrainingModule(**defaults)

    return _make
